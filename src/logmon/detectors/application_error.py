"""Application error severity check."""

from .base import Alert, AlertType, DetectionContext, SecurityCheck


class ApplicationErrorCheck(SecurityCheck):
    """Raises an alert for application log records at error severity or above."""

    ERROR_SEVERITIES = frozenset({'ERROR', 'FATAL', 'CRITICAL'})

    @property
    def name(self) -> str:
        return 'application_error'

    @property
    def alert_type(self) -> AlertType:
        return AlertType.APPLICATION_ERROR

    def check(self, ctx: DetectionContext) -> Alert | None:
        severity = ctx.record.severity
        if severity is None or severity.upper() not in self.ERROR_SEVERITIES:
            return None
        return self.make_alert(ctx, f'{severity.upper()}: {ctx.record.message}')
