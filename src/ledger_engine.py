import logging
from typing import Dict, Optional, Tuple

from errors import MalformedRecordError
from models import Transaction, TransactionType, ClientAccount, DisputeState, ProcessingResult
from state_manager import LedgerState

logger = logging.getLogger(__name__)


class LedgerEngine:
    """
    Applies ledger events to account state, one at a time, in arrival order.

    Policy outcomes (missing account, missing transaction, insufficient funds,
    dispute not open, frozen account) are reported through ProcessingResult and
    never raised. The only exception that escapes apply() is MalformedRecordError
    for a deposit or withdrawal that carries no amount.
    """

    def __init__(self, state: Optional[LedgerState] = None):
        self._state = state if state is not None else LedgerState()

    @property
    def state(self) -> LedgerState:
        return self._state

    def apply(self, transaction: Transaction) -> ProcessingResult:
        """
        Apply a single event.

        Returns:
            APPLIED: State was changed or the record was stored
            DENIED: Silently refused by policy
            IGNORED: Unrecognised event type

        Any event for a locked client counts as DENIED, unknown types included.
        """
        account = self._state.get_account(transaction.client_id)

        if account is not None and account.locked:
            logger.info(f"tx {transaction.transaction_id}: client {transaction.client_id} is locked, discarding {transaction.transaction_type.value}")
            return ProcessingResult.DENIED

        if transaction.transaction_type.carries_amount and transaction.amount is None:
            raise MalformedRecordError(f"{transaction.transaction_type.value} tx {transaction.transaction_id} has no amount")

        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                return self._handle_deposit(account, transaction)
            case TransactionType.WITHDRAWAL:
                return self._handle_withdrawal(account, transaction)
            case TransactionType.DISPUTE:
                return self._handle_dispute(account, transaction)
            case TransactionType.RESOLVE:
                return self._handle_resolve(account, transaction)
            case TransactionType.CHARGEBACK:
                return self._handle_chargeback(account, transaction)
            case _:
                logger.info(f"tx {transaction.transaction_id}: unknown event type, ignoring")
                return ProcessingResult.IGNORED

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        return self._state.get_all_accounts()

    def _store(self, transaction: Transaction) -> None:
        transaction.dispute_state = DisputeState.NOT_DISPUTED
        previous = self._state.store_transaction(transaction)
        if previous is not None:
            logger.warning(f"tx {transaction.transaction_id}: id reused by {transaction.transaction_type.value}, replacing stored {previous.transaction_type.value}")

    def _handle_deposit(self, account: Optional[ClientAccount], transaction: Transaction) -> ProcessingResult:
        if account is None:
            account = self._state.open_account(transaction.client_id)
        account.credit(transaction.amount)
        self._store(transaction)
        return ProcessingResult.APPLIED

    def _handle_withdrawal(self, account: Optional[ClientAccount], transaction: Transaction) -> ProcessingResult:
        # The record is kept even when the withdrawal is refused.
        self._store(transaction)

        if account is None:
            logger.info(f"Withdrawal tx {transaction.transaction_id}: no account for client {transaction.client_id}")
            return ProcessingResult.DENIED

        if account.available < transaction.amount:
            logger.info(f"Withdrawal tx {transaction.transaction_id}: insufficient funds ({account.available} < {transaction.amount})")
            return ProcessingResult.DENIED

        account.debit(transaction.amount)
        return ProcessingResult.APPLIED

    def _lookup(self, account: Optional[ClientAccount], transaction: Transaction) -> Tuple[Optional[ClientAccount], Optional[Transaction]]:
        """Find the stored record a dispute, resolve or chargeback refers to."""
        kind = transaction.transaction_type.value.capitalize()

        if account is None:
            logger.info(f"{kind} for tx {transaction.transaction_id}: no account for client {transaction.client_id}")
            return None, None

        original = self._state.get_transaction(transaction.transaction_id)
        if original is None:
            logger.info(f"{kind} for tx {transaction.transaction_id}: transaction not found")
            return None, None

        if original.client_id != transaction.client_id:
            logger.warning(f"{kind} for tx {transaction.transaction_id}: transaction belongs to client {original.client_id}, applying to client {transaction.client_id}")

        return account, original

    def _handle_dispute(self, account: Optional[ClientAccount], transaction: Transaction) -> ProcessingResult:
        account, original = self._lookup(account, transaction)
        if original is None:
            return ProcessingResult.DENIED

        if original.is_disputed:
            # Funds shift again on a repeated dispute.
            logger.warning(f"Dispute for tx {transaction.transaction_id}: transaction already disputed")

        original.dispute_state = DisputeState.DISPUTED
        logger.debug(f"Disputed {original!r}")

        # Withdrawals are final once executed: disputing one moves no funds.
        if original.transaction_type == TransactionType.DEPOSIT:
            account.hold(original.amount)
        return ProcessingResult.APPLIED

    def _handle_resolve(self, account: Optional[ClientAccount], transaction: Transaction) -> ProcessingResult:
        account, original = self._lookup(account, transaction)
        if original is None:
            return ProcessingResult.DENIED

        if not original.is_disputed:
            logger.info(f"Resolve for tx {transaction.transaction_id}: transaction is not under dispute")
            return ProcessingResult.DENIED

        original.dispute_state = DisputeState.RESOLVED
        account.release_hold(original.amount)
        return ProcessingResult.APPLIED

    def _handle_chargeback(self, account: Optional[ClientAccount], transaction: Transaction) -> ProcessingResult:
        account, original = self._lookup(account, transaction)
        if original is None:
            return ProcessingResult.DENIED

        if not original.is_disputed:
            logger.info(f"Chargeback for tx {transaction.transaction_id}: transaction is not under dispute")
            return ProcessingResult.DENIED

        account.charge_back(original.amount)
        logger.info(f"Chargeback for tx {transaction.transaction_id}: client {account.client_id} locked")
        return ProcessingResult.APPLIED
