from prometheus_client import Counter, Histogram


class MarketplaceMetrics:
    """
    Seat inventory and transaction lifecycle metrics

    Exposed on /metrics; every label set is small and bounded (no ids).
    """

    def __init__(self):
        # ========== Checkout ==========
        self.checkout_requests = Counter(
            'marketplace_checkout_requests_total',
            'Checkout attempts by outcome',
            ['result'],  # created, error, or the error kind that ended the request
        )

        self.checkout_compensations = Counter(
            'marketplace_checkout_compensations_total',
            'Checkouts rolled back after a reservation was refused or failed',
        )

        self.checkout_duration = Histogram(
            'marketplace_checkout_duration_seconds',
            'Checkout processing time',
            buckets=[0.01, 0.05, 0.1, 0.2, 0.5, 1.0, 2.0, 5.0],
        )

        # ========== Ledger ==========
        self.seat_moves = Counter(
            'marketplace_seat_moves_total',
            'Seats moved through the tier ledger',
            ['operation'],  # reserve/release
        )

        self.reservation_refusals = Counter(
            'marketplace_reservation_refusals_total',
            'Conditional decrements refused for lack of seats',
        )

        # ========== Lifecycle ==========
        self.transitions = Counter(
            'marketplace_transaction_transitions_total',
            'Transaction status transitions',
            ['trigger', 'result'],  # result: applied/lost_race/rejected
        )

        self.sweep_runs = Counter(
            'marketplace_sweep_runs_total',
            'Expiry sweeper runs',
            ['result'],
        )

        self.swept_transactions = Counter(
            'marketplace_swept_transactions_total',
            'Transactions expired by the sweeper',
        )

    # ========== Helper Methods ==========

    def record_checkout(self, *, result: str, duration: float) -> None:
        self.checkout_requests.labels(result=result).inc()
        self.checkout_duration.observe(duration)

    def record_seat_move(self, *, operation: str, seats: int) -> None:
        self.seat_moves.labels(operation=operation).inc(seats)

    def record_transition(self, *, trigger: str, result: str) -> None:
        self.transitions.labels(trigger=trigger, result=result).inc()

    def record_sweep(self, *, result: str, expired: int = 0) -> None:
        self.sweep_runs.labels(result=result).inc()
        if expired:
            self.swept_transactions.inc(expired)


# Global metrics instance
metrics = MarketplaceMetrics()
