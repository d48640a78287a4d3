"""Suspicious request pattern check."""

import re
from urllib.parse import unquote

from .base import Alert, AlertType, DetectionContext, SecurityCheck, SuspiciousPattern


# Checked in order; the first matching rule wins
DEFAULT_SUSPICIOUS_PATTERNS: tuple[SuspiciousPattern, ...] = (
    SuspiciousPattern.compile(
        'sql_injection',
        r"(union(\s|\+|%20)+(all(\s|\+|%20)+)?select|select(\s|\+|%20)+.+(\s|\+|%20)+from"
        r"|insert(\s|\+|%20)+into|delete(\s|\+|%20)+from|drop(\s|\+|%20)+table"
        r"|('|%27)(\s|\+|%20)*or(\s|\+|%20)*('|%27|\d))",
        re.IGNORECASE,
    ),
    SuspiciousPattern.compile('path_traversal', r'\.\.(/|\\|%2f|%5c)', re.IGNORECASE),
    SuspiciousPattern.compile('script_tag', r'<script[^>]*>', re.IGNORECASE),
    SuspiciousPattern.compile('script_query', r'\.(php|asp|aspx|jsp)\S*\?\S*=', re.IGNORECASE),
)


class SuspiciousPatternCheck(SecurityCheck):
    """Flags records whose path or message matches a suspicious pattern.

    Only the first matching rule raises an alert, so one line yields at most
    one SuspiciousRequest alert.
    """

    def __init__(self, patterns: list[SuspiciousPattern] | tuple[SuspiciousPattern, ...] | None = None):
        self.patterns = tuple(DEFAULT_SUSPICIOUS_PATTERNS if patterns is None else patterns)

    @property
    def name(self) -> str:
        return 'suspicious_pattern'

    @property
    def alert_type(self) -> AlertType:
        return AlertType.SUSPICIOUS_REQUEST

    def _candidates(self, ctx: DetectionContext) -> list[str]:
        record = ctx.record
        texts = []
        if record.path:
            texts.append(record.path)
            decoded = unquote(record.path)
            if decoded != record.path:
                texts.append(decoded)
        if record.message:
            texts.append(record.message)
        return texts

    def match(self, texts: list[str]) -> SuspiciousPattern | None:
        """Return the first rule matching any of ``texts``."""
        for rule in self.patterns:
            if any(rule.search(text) for text in texts):
                return rule
        return None

    def check(self, ctx: DetectionContext) -> Alert | None:
        rule = self.match(self._candidates(ctx))
        if rule is None:
            return None

        ctx.statistics.suspicious_request_count += 1
        record = ctx.record
        source = record.source_address or 'unknown source'
        target = record.path if record.path is not None else record.message
        return self.make_alert(ctx, f'Potential attack from {source}: {target} ({rule.name})')
