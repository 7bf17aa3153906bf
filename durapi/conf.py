from __future__ import annotations

"""
Settings for the RPC layer.

Every component reads its defaults from the module level `settings` instance
and accepts an explicit `RpcSettings` override. Values can be supplied through
the environment with `RpcSettings.from_env()`:

- DURAPI_AUTHORITY
- DURAPI_MAX_ATTEMPTS
- DURAPI_BASE_DELAY
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

DEFAULT_AUTHORITY = "https://durable/"
DIRECT_RESPONSE_HEADER = "X-Direct-Response"

TRANSIENT_PHRASES: tuple[str, ...] = (
    "Network connection lost",
    "Cannot resolve Durable Object due to transient issue on remote node",
    "Durable Object reset because its code was updated",
)


@dataclass(frozen=True, slots=True)
class RpcSettings:
    """
    Configuration shared by the stub, the dispatcher and the retry policy.

    Parameters
    ----------
    authority:
        Reserved internal authority. Requests under it are RPC calls; any
        other request is native traffic for the actor.
    direct_header:
        Out-of-band marker for responses returned verbatim to the caller.
    max_attempts:
        Total attempts for one logical call (initial call included).
    base_delay:
        Delay in seconds before the first retry. Doubles with each retry.
    transient_phrases:
        Error message fragments treated as transient when an error carries
        no structured `transient` tag.
    """

    authority: str = DEFAULT_AUTHORITY
    direct_header: str = DIRECT_RESPONSE_HEADER
    max_attempts: int = 11
    base_delay: float = 0.01
    transient_phrases: tuple[str, ...] = field(default=TRANSIENT_PHRASES)

    @classmethod
    def from_env(
        cls,
        prefix: str = "DURAPI_",
        environ: Mapping[str, str] | None = None,
    ) -> "RpcSettings":
        """
        Build settings from environment variables named `<prefix><FIELD>`.

        Raises
        ------
        ValueError
            If a numeric variable cannot be parsed.
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        authority = env.get(f"{prefix}AUTHORITY", defaults.authority)
        if not authority.endswith("/"):
            authority += "/"

        return cls(
            authority=authority,
            max_attempts=int(env.get(f"{prefix}MAX_ATTEMPTS", defaults.max_attempts)),
            base_delay=float(env.get(f"{prefix}BASE_DELAY", defaults.base_delay)),
        )


settings = RpcSettings.from_env()
