"""
Contract interface and the calls the keeper is allowed to make.

A ContractInterface wraps a list of human-readable signatures such as
"function propose()". Only entries that are exactly `function <name>()` are
invocable; each gets a precomputed selector so a call is a lookup in a closed
mapping rather than dynamic attribute access.
"""

import re
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional, Tuple

from eth_utils import keccak, to_checksum_address

from .signer import OperatorSigner

_ZERO_ARG_FUNCTION = re.compile(r"^function ([A-Za-z_$][A-Za-z0-9_$]*)\(\)$")


class UnknownFunctionError(KeyError):
    """The requested name is not an invocable zero-argument function."""

    def __init__(self, function_name: str):
        self.function_name = function_name
        super().__init__(f"Contract's ABI doesn't have function {function_name}")

    def __str__(self) -> str:
        return self.args[0]


def function_selector(function_name: str) -> str:
    """4-byte selector of `<name>()` as 0x-prefixed hex."""
    return "0x" + keccak(text=f"{function_name}()")[:4].hex()


@dataclass(frozen=True)
class ZeroArgCall:
    """A typed, argument-free invocation of one contract function."""
    function_name: str
    selector: str

    @property
    def calldata(self) -> str:
        return self.selector


class ContractInterface:
    """Human-readable ABI with its zero-argument functions resolved up front."""

    def __init__(self, signatures: Iterable[str]):
        self.signatures: Tuple[str, ...] = tuple(signatures)
        calls: Dict[str, ZeroArgCall] = {}
        for signature in self.signatures:
            match = _ZERO_ARG_FUNCTION.match(signature)
            if match:
                name = match.group(1)
                calls[name] = ZeroArgCall(name, function_selector(name))
        self._calls = calls

    def has_function(self, function_name: Optional[str]) -> bool:
        """True iff `function <name>()` is declared verbatim."""
        if not function_name:
            return False
        return f"function {function_name}()" in self.signatures

    @property
    def callable_functions(self) -> Mapping[str, ZeroArgCall]:
        return dict(self._calls)

    def call_for(self, function_name: str) -> ZeroArgCall:
        try:
            return self._calls[function_name]
        except KeyError:
            raise UnknownFunctionError(function_name) from None

    def __contains__(self, function_name: object) -> bool:
        return isinstance(function_name, str) and self.has_function(function_name)

    def __len__(self) -> int:
        return len(self.signatures)


@dataclass(frozen=True)
class TargetContract:
    """Deployed address + interface + the signer that calls it."""
    address: str
    interface: ContractInterface
    signer: OperatorSigner

    @classmethod
    def at(cls, address: str, interface: ContractInterface, signer: OperatorSigner) -> "TargetContract":
        return cls(to_checksum_address(address), interface, signer)

    def operation(self, function_name: str) -> ZeroArgCall:
        return self.interface.call_for(function_name)
