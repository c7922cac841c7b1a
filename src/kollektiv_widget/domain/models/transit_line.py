"""Transit line domain model."""

from dataclasses import dataclass

from .transport_mode import TransportMode


@dataclass(frozen=True)
class TransitLine:
    """A line + destination pair serving a stop."""

    line_code: str
    line_name: str
    destination: str
    transport_mode: TransportMode

    @property
    def sort_key(self) -> tuple[int, int, int, str]:
        """Order by transport mode priority, then numeric line code, then lexically."""
        code = self.line_code.strip()
        if code.isdigit():
            return (self.transport_mode.priority, 0, int(code), code)
        return (self.transport_mode.priority, 1, 0, code)
