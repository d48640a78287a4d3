"""Per-address error threshold check with auto-blacklisting."""

from .base import Alert, AlertType, DetectionContext, SecurityCheck


class ErrorThresholdCheck(SecurityCheck):
    """Blacklists an address once its error responses reach the threshold.

    Only records with a status code of 400 or above are counted. The alert is
    edge-triggered: it fires once, on the record that reaches the threshold,
    and never again for that address in the session.
    """

    DEFAULT_THRESHOLD = 10

    def __init__(self, threshold: int = DEFAULT_THRESHOLD):
        if threshold < 1:
            raise ValueError(f'Error threshold must be positive, got {threshold}')
        self.threshold = threshold

    @property
    def name(self) -> str:
        return 'error_threshold'

    @property
    def alert_type(self) -> AlertType:
        return AlertType.IP_BLACKLISTED

    def check(self, ctx: DetectionContext) -> Alert | None:
        record = ctx.record
        if not record.is_error_status or record.source_address is None:
            return None

        address = record.source_address
        errors = ctx.statistics.record_error(address)
        if errors >= self.threshold and address not in ctx.blacklist:
            ctx.blacklist.add(address)
            return self.make_alert(ctx, f'IP {address} blacklisted for {errors} errors')
        return None
