"""Exception hierarchy for the NAD provisioner.

Configuration problems are fatal and raised before any cluster interaction.
Client errors are scoped to a single resource and recovered by the executor
as a failed item outcome.
"""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Base class for invalid job configuration."""


class InvalidRangeError(ConfigurationError):
    """The VLAN range is malformed, inverted or outside 1-4094."""


class MalformedRangeError(InvalidRangeError):
    """The range text is not ``START-END`` with decimal bounds."""


class InvertedRangeError(InvalidRangeError):
    """START is greater than END."""


class RangeOutOfBoundsError(InvalidRangeError):
    """A bound falls outside the 802.1Q VLAN id space."""


class InvalidLabelsError(ConfigurationError):
    """No usable ``key=value`` entry could be parsed from the label input."""


class InvalidConcurrencyError(ConfigurationError):
    """The worker budget is not a positive integer."""


class InvalidMtuError(ConfigurationError):
    """The MTU is outside the 68-9000 window."""


class MissingFieldError(ConfigurationError):
    """A field required by the selected operation was not supplied."""


class FlagNotApplicableError(ConfigurationError):
    """A flag was supplied for a network kind or operation that ignores it."""


class ClientNotFoundError(ConfigurationError):
    """Neither ``oc`` nor ``kubectl`` could be located on ``PATH``."""


class ClientError(Exception):
    """A single cluster API call failed for one resource.

    Attributes:
        action: Client verb that failed (``apply``, ``get`` or ``delete``).
        name: Resource name.
        namespace: Resource namespace.
        output: Raw output captured from the client.
    """

    def __init__(self, action: str, name: str, namespace: str, output: str) -> None:
        self.action = action
        self.name = name
        self.namespace = namespace
        self.output = output
        super().__init__(output or f"{action} failed for {namespace}/{name}")
