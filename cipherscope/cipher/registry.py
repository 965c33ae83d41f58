from __future__ import annotations

from typing import Dict, List, Optional, Type

from ..errors import CipherError, UnknownCipherError
from .builder import Cipher
from .chacha20 import ChaCha20
from .des import DES
from .idea import IDEA
from .spec import CipherSpec
from .twofish import Twofish
from .validator import validate_spec


def builtins() -> Dict[str, Type[Cipher]]:
    return {
        "des": DES,
        "idea": IDEA,
        "twofish": Twofish,
        "chacha20": ChaCha20,
    }


class CipherRegistry:
    def __init__(self):
        self._engines: Dict[str, Type[Cipher]] = builtins()

    @staticmethod
    def _normalize(name: str) -> str:
        return name.strip().lower()

    def get(self, name: str) -> Type[Cipher]:
        key = self._normalize(name)
        if key not in self._engines:
            raise UnknownCipherError(name)
        return self._engines[key]

    def list(self) -> List[str]:
        return sorted(self._engines)

    def specs(self) -> List[CipherSpec]:
        return [self._engines[n].spec for n in self.list()]

    def exists(self, name: str) -> bool:
        return self._normalize(name) in self._engines

    def register(self, name: str, engine: Type[Cipher]) -> None:
        ok, errs = validate_spec(engine.spec)
        if not ok:
            raise CipherError(f"Invalid spec for {name}: " + "; ".join(errs))
        self._engines[self._normalize(name)] = engine


def list_ciphers(registry: Optional[CipherRegistry] = None) -> List[str]:
    return (registry or CipherRegistry()).list()


def get_cipher_spec(name: str, registry: Optional[CipherRegistry] = None) -> CipherSpec:
    return (registry or CipherRegistry()).get(name).spec


def build_cipher(name: str, registry: Optional[CipherRegistry] = None) -> Cipher:
    """Instantiate the engine registered under ``name`` (case-insensitive)."""
    reg = registry or CipherRegistry()
    return reg.get(name)()
