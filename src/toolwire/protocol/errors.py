"""Shared error types for the protocol layer."""


class ProtocolError(Exception):
    """Base error for all protocol-layer failures."""


class ParseError(ProtocolError):
    """An input line is not well-formed JSON."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__("Parse error" + (f": {detail}" if detail else ""))


class RegistryError(ProtocolError):
    """The tool registry was built incorrectly (fatal at startup)."""


class DuplicateToolError(RegistryError):
    """A tool name was registered twice."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tool already registered: {name}")


class RegistryFrozenError(RegistryError):
    """Registration was attempted after the registry was frozen."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Registry is frozen, cannot register: {name}")


class ToolNotFoundError(ProtocolError):
    """Requested tool does not exist in the registry."""

    def __init__(self, name: str | None) -> None:
        self.name = name
        super().__init__(f"Tool '{name}' not found")

