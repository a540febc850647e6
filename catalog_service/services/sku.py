"""
SKU Allocator

Candidate format is PREFIX-VEND-TTTTTT: the first 3 characters of the product
name, the last 4 characters of the vendor id and the last 6 digits of the
clock in epoch milliseconds. Collisions get a -1, -2, ... suffix.

The existence check is advisory; the unique sku index on the products
collection is what makes allocation safe under concurrent creates.
"""

import re
import time
from typing import Callable, Optional

from catalog_service.repositories.product import ProductRepository

Clock = Callable[[], int]

_NON_ALNUM = re.compile(r"[^A-Z0-9]")


def epoch_millis() -> int:
    return int(time.time() * 1000)


def normalize_sku(sku: Optional[str]) -> Optional[str]:
    """Trim and upper-case a caller-supplied SKU; blank means none"""
    if sku is None or not sku.strip():
        return None
    return sku.strip().upper()


class SkuAllocator:
    """Allocates collision-free SKUs against the product store"""

    def __init__(self, repository: ProductRepository, clock: Clock = None):
        self.repository = repository
        self.clock = clock or epoch_millis

    def candidate_base(self, product_name: str, vendor_id: str) -> str:
        prefix = _NON_ALNUM.sub("X", product_name.strip()[:3].upper())
        vendor_suffix = str(vendor_id)[-4:].upper()
        time_tag = str(self.clock())[-6:]
        return f"{prefix}-{vendor_suffix}-{time_tag}"

    @staticmethod
    def with_counter(base: str, counter: int) -> str:
        return base if counter == 0 else f"{base}-{counter}"

    @staticmethod
    def counter_of(sku: str, base: str) -> int:
        """Counter suffix of an allocated SKU (0 for the bare base)"""
        if sku == base:
            return 0
        suffix = sku[len(base) + 1:] if sku.startswith(f"{base}-") else ""
        return int(suffix) if suffix.isdigit() else 0

    async def first_free(self, base: str, counter: int = 0) -> str:
        """First SKU at or after counter that no product holds"""
        candidate = self.with_counter(base, counter)
        while await self.repository.sku_exists(candidate):
            counter += 1
            candidate = self.with_counter(base, counter)
        return candidate

    async def allocate(self, product_name: str, vendor_id: str) -> str:
        return await self.first_free(self.candidate_base(product_name, vendor_id))
