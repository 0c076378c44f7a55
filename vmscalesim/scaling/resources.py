"""Resource kinds a vertical scaling binding can target."""

from enum import Enum


class ResourceKind(Enum):
    """VM resources that can be scaled vertically."""
    PE = "pe"
    RAM = "ram"
    BANDWIDTH = "bandwidth"

    @classmethod
    def from_name(cls, name: str) -> "ResourceKind":
        """Resolve a configuration name to a resource kind.

        Args:
            name: One of cpu, pe, ram, memory, bw, bandwidth (any case)

        Returns:
            Matching resource kind

        Raises:
            ValueError: If the name is unknown
        """
        key = str(name).strip().lower()
        try:
            return _ALIASES[key]
        except KeyError:
            raise ValueError(f"Unknown resource kind: {name!r}") from None


_ALIASES = {
    'cpu': ResourceKind.PE,
    'pe': ResourceKind.PE,
    'pes': ResourceKind.PE,
    'ram': ResourceKind.RAM,
    'memory': ResourceKind.RAM,
    'bw': ResourceKind.BANDWIDTH,
    'bandwidth': ResourceKind.BANDWIDTH,
}
