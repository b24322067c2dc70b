# zcash_keys/keys/unified_keys.py
from typing import Iterable, List, Optional, Tuple, Type, TypeVar

from zcash_keys.addresses.unified import UnifiedAddress
from zcash_keys.core.exceptions import InvalidKeyError
from zcash_keys.core.zcash_types import DecodeError, DecodeResult, Network, Pool
from zcash_keys.crypto.unified_encoding import UnifiedEncoding, UnifiedEncodingMetadata, human_readable_part
from zcash_keys.keys.diversifier import DiversifierIndex
from zcash_keys.keys.elements import UnifiedContainerKind
from zcash_keys.keys import orchard, sapling
from zcash_keys.keys.transparent import TransparentFullViewingKey, TransparentIncomingViewingKey
from zcash_keys.zip32.common import HARDENED_BIT
from zcash_keys.utils.logging import get_logger

logger = get_logger(__name__)

K = TypeVar('K')

FULL_VIEWING_KEY_TYPES = (TransparentFullViewingKey, sapling.DiversifiableFullViewingKey, orchard.FullViewingKey)
INCOMING_VIEWING_KEY_TYPES = (TransparentIncomingViewingKey, sapling.IncomingViewingKey, orchard.IncomingViewingKey)

class UnifiedViewingKey:
    """ZIP-316 unified viewing key: one viewing key per pool behind a single string"""

    KIND: UnifiedContainerKind = None
    KEY_TYPES: tuple = ()

    def __init__(self, encoded: str, keys: Iterable, network: Network,
                 metadata: Optional[UnifiedEncodingMetadata] = None):
        self._encoded = encoded
        self._keys = tuple(sorted(keys, key=lambda k: k.unified_type_code))
        self._network = network
        self._metadata = metadata or UnifiedEncodingMetadata()

    @classmethod
    def create(cls, keys: Iterable, metadata: Optional[UnifiedEncodingMetadata] = None):
        """Combine per-pool viewing keys that all belong to one network"""
        keys = [cls._reduce(k) for k in keys]
        if not keys:
            raise ValueError("Cannot create a unified viewing key with no viewing keys.")
        networks = {k.network for k in keys}
        if len(networks) != 1:
            raise ValueError("All viewing keys must belong to the same network.")
        network = networks.pop()
        encoded = UnifiedEncoding.encode(human_readable_part(cls.KIND, network), keys, metadata)
        return cls(encoded, keys, network, metadata)

    @classmethod
    def _reduce(cls, key):
        if not isinstance(key, cls.KEY_TYPES):
            raise TypeError(f"Key {type(key).__name__} is not supported in a unified {cls.KIND.value}.")
        return key

    @classmethod
    def try_parse(cls, encoded: str) -> DecodeResult:
        """Parse a ``uview``/``uivk`` string into the matching subclass"""
        decoded = UnifiedEncoding.try_decode(encoded)
        if not decoded.success:
            return decoded
        contents = decoded.value
        target = {
            UnifiedContainerKind.FULL_VIEWING_KEY: UnifiedFullViewingKey,
            UnifiedContainerKind.INCOMING_VIEWING_KEY: UnifiedIncomingViewingKey,
        }.get(contents.kind)
        if target is None or (cls.KIND is not None and cls.KIND != contents.kind):
            return DecodeResult.failure(DecodeError.TYPE_MISMATCH,
                                        f"Expected a unified viewing key but found a unified {contents.kind.value}.")
        return DecodeResult.ok(target(encoded, contents.elements, contents.network, contents.metadata))

    @classmethod
    def parse(cls, encoded: str):
        result = cls.try_parse(encoded)
        if not result.success:
            raise InvalidKeyError(result.message)
        return result.value

    @property
    def encoded(self) -> str:
        return self._encoded

    @property
    def network(self) -> Network:
        return self._network

    @property
    def metadata(self) -> UnifiedEncodingMetadata:
        return self._metadata

    @property
    def keys(self) -> List:
        return list(self._keys)

    def get_viewing_key(self, key_type: Type[K]) -> Optional[K]:
        for key in self._keys:
            if isinstance(key, key_type):
                return key
        return None

    def get_pool_key(self, pool: Pool):
        for key in self._keys:
            if key.pool == pool:
                return key
        return None

    @property
    def incoming_viewing_keys(self) -> List:
        return list(self._keys)

    def create_address(self, diversifier_index=0,
                       include_transparent: bool = True) -> Tuple[DiversifierIndex, UnifiedAddress]:
        """
        Unified address at the first index at or after ``diversifier_index``
        that every shielded pool in this key accepts.
        """
        index = DiversifierIndex.of(diversifier_index)
        ivks = self.incoming_viewing_keys
        sapling_ivk = next((k for k in ivks if isinstance(k, sapling.IncomingViewingKey)), None)
        if sapling_ivk is not None:
            index, _ = sapling_ivk.find_receiver(index)

        receivers = []
        for ivk in ivks:
            if isinstance(ivk, TransparentIncomingViewingKey):
                if not include_transparent:
                    continue
                if index.value >= HARDENED_BIT:
                    logger.debug("Omitting transparent receiver beyond the non-hardened range", index=index.value)
                    continue
            receivers.append(ivk.create_receiver(index))
        return index, UnifiedAddress.create(receivers, self._network)

    @property
    def default_address(self) -> UnifiedAddress:
        return self.create_address(0)[1]

    def __iter__(self):
        return iter(self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def __str__(self) -> str:
        return self._encoded

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._encoded!r})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, UnifiedViewingKey):
            return NotImplemented
        return self._encoded == other._encoded

    def __hash__(self) -> int:
        return hash(self._encoded)

class UnifiedIncomingViewingKey(UnifiedViewingKey):
    """Unified incoming viewing key (``uivk``)"""

    KIND = UnifiedContainerKind.INCOMING_VIEWING_KEY
    KEY_TYPES = INCOMING_VIEWING_KEY_TYPES + FULL_VIEWING_KEY_TYPES

    @classmethod
    def _reduce(cls, key):
        key = super()._reduce(key)
        if isinstance(key, FULL_VIEWING_KEY_TYPES):
            return key.incoming_viewing_key
        return key

class UnifiedFullViewingKey(UnifiedViewingKey):
    """Unified full viewing key (``uview``)"""

    KIND = UnifiedContainerKind.FULL_VIEWING_KEY
    KEY_TYPES = FULL_VIEWING_KEY_TYPES

    @property
    def incoming_viewing_key(self) -> UnifiedIncomingViewingKey:
        return UnifiedIncomingViewingKey.create(self._keys, self._metadata if not self._metadata.is_empty else None)

    @property
    def incoming_viewing_keys(self) -> List:
        return [key.incoming_viewing_key for key in self._keys]
