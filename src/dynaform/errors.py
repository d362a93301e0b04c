"""
Exceptions raised by dynaform.

Structural problems in a form configuration are fatal for that
configuration and surface as ConfigurationError. Validation failures of
submitted data are not exceptions; they are reported in ValidationResult.
"""


class ConfigurationError(ValueError):
    """
    A form configuration is structurally invalid.

    Attributes:
        path: Location of the offending element or field name, if known.
        component: Name of the custom component involved, if any.
    """

    def __init__(
        self,
        message: str,
        path: str | None = None,
        component: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.path = path
        self.component = component

    def __str__(self) -> str:
        return self.format_message(self.message, self.path, self.component)

    @staticmethod
    def format_message(
        base_message: str,
        path: str | None = None,
        component: str | None = None,
    ) -> str:
        """
        Prefix a message with component and path context.

        Example:
            >>> ConfigurationError.format_message("must be positive", "elements[2]", "Rating")
            'Component "Rating" at elements[2]: must be positive'
        """
        parts: list[str] = []
        if component:
            parts.append(f'Component "{component}"')
        if path:
            parts.append(f"at {path}")
        if parts:
            return f"{' '.join(parts)}: {base_message}"
        return base_message


class ComponentNotFoundError(ConfigurationError):
    """A custom element names a component that is not registered."""

    def __init__(self, component: str, path: str | None = None):
        super().__init__(
            "No custom component registered under this name",
            path=path,
            component=component,
        )
