"""
Synthetic Territory Generator

Generates a realistic lighting-distributor territory for demos and tests.
Includes:
- Dealers (showrooms) with company names
- Collections with SKU families, descriptions and price points
- Stocking, replenishment and project orders with realistic patterns
- Floor displays installed from each dealer's stocking orders
"""

import random
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, List, Optional, Tuple

import numpy as np
from faker import Faker

from dealer_insights.models.records import CatalogEntry, DisplayRecord, DisplayStatus, RawOrder

# =============================================================================
# CONFIGURATION
# =============================================================================

FIXTURE_TYPES = [
    "LED Pendant",
    "Chandelier",
    "Wall Sconce",
    "Flush Mount",
    "Semi-Flush Mount",
    "Linear Pendant",
    "Floor Lamp",
    "Table Lamp",
]

FINISHES = ["Chrome", "Matte Black", "Aged Brass", "Satin Nickel", "Bronze", "Gold Leaf"]

DISPLAY_STATUSES = [
    (DisplayStatus.ACTIVE, 0.85),
    (DisplayStatus.MISSING, 0.05),
    (DisplayStatus.ARCHIVED, 0.10),
]


@dataclass
class Dealer:
    """A showroom in the territory"""
    customer_id: str
    name: str
    city: str
    activity: float  # Relative weekly order rate


@dataclass
class Collection:
    """A collection and its SKU family"""
    name: str
    skus: List[str]
    descriptions: Dict[str, str]
    prices: Dict[str, float]
    launched: date


@dataclass
class TerritoryDataset:
    """Everything generated for one territory"""
    dealers: List[Dealer]
    collections: List[Collection]
    orders: List[RawOrder]
    displays: List[DisplayRecord]
    catalog: List[CatalogEntry] = field(default_factory=list)

    @property
    def descriptions(self) -> Dict[str, str]:
        """Item description per SKU"""
        return {sku: desc for c in self.collections for sku, desc in c.descriptions.items()}


# =============================================================================
# GENERATORS
# =============================================================================

class DealerGenerator:
    """Generate showrooms"""

    def __init__(self, fake: Faker, rng: np.random.Generator):
        self.fake = fake
        self.rng = rng

    def generate(self, n: int = 12) -> List[Dealer]:
        """Generate n dealers"""
        activity = self.rng.lognormal(mean=0.0, sigma=0.5, size=n)
        return [
            Dealer(
                customer_id=f"C{10001 + i:05d}",
                name=f"{self.fake.last_name()} Lighting",
                city=self.fake.city(),
                activity=float(activity[i]),
            )
            for i in range(n)
        ]


class CollectionGenerator:
    """Generate collections with SKU families"""

    def __init__(self, fake: Faker, rng: np.random.Generator, py_random: random.Random):
        self.fake = fake
        self.rng = rng
        self.random = py_random

    def generate(self, n: int, start: date, end: date) -> List[Collection]:
        """Generate n collections launched between start and end"""
        names = set()
        while len(names) < n:
            names.add(self.fake.last_name())

        span = max((end - start).days, 1)
        collections = []
        for i, name in enumerate(sorted(names)):
            base = 10100 + i * 2
            fixture = self.random.choice(FIXTURE_TYPES)
            # Price point per collection; a few are high-ticket
            price = float(np.round(self.rng.lognormal(mean=6.5, sigma=0.8), 2))
            n_skus = int(self.rng.integers(3, 9))

            skus, descriptions, prices = [], {}, {}
            for j in range(n_skus):
                sku = f"{base}-{j + 1:02d}"
                lights = self.random.choice([1, 3, 5, 6, 9, 12])
                finish = self.random.choice(FINISHES)
                skus.append(sku)
                descriptions[sku] = f"{name}, {lights} Light {fixture}, {finish}"
                prices[sku] = round(price * (1 + 0.15 * (lights - 1) / 3), 2)

            # Most collections predate the window; some launch inside it
            if self.random.random() < 0.75:
                launched = start - timedelta(days=int(self.rng.integers(30, 720)))
            else:
                launched = start + timedelta(days=int(self.rng.integers(0, span)))
            collections.append(Collection(name, skus, descriptions, prices, launched))

        return collections


class OrderGenerator:
    """Generate order lines with stocking, replenishment and project patterns"""

    def __init__(
        self,
        dealers: List[Dealer],
        collections: List[Collection],
        rng: np.random.Generator,
        py_random: random.Random,
    ):
        self.dealers = dealers
        self.collections = collections
        self.rng = rng
        self.random = py_random
        self._order_seq = 0

    def _order_number(self) -> str:
        self._order_seq += 1
        return f"SO{self._order_seq:06d}"

    def _line(self, dealer: Dealer, collection: Collection, sku: str, qty: int, day: date, order_no: str) -> RawOrder:
        return RawOrder(
            sku=sku,
            collection_name=collection.name,
            quantity=float(qty),
            unit_price=collection.prices[sku],
            order_date=day,
            customer_id=dealer.customer_id,
            order_number=order_no,
        )

    def stocking_order(self, dealer: Dealer, day: date) -> List[RawOrder]:
        """Wide floor-setup order: 8-12 SKUs, one or two of each"""
        available = [c for c in self.collections if c.launched <= day]
        if not available:
            return []
        picks = self.random.sample(available, k=min(len(available), self.random.randint(3, 5)))
        pool = [(c, sku) for c in picks for sku in c.skus]
        chosen = self.random.sample(pool, k=min(len(pool), self.random.randint(8, 12)))
        order_no = self._order_number()
        return [
            self._line(dealer, c, sku, 1 if self.random.random() < 0.8 else 2, day, order_no)
            for c, sku in chosen
        ]

    def replenishment_order(self, dealer: Dealer, day: date, favourites: List[Collection]) -> List[RawOrder]:
        """Standard reorder: a few SKUs, one to three units each"""
        pool = favourites or [c for c in self.collections if c.launched <= day]
        if not pool:
            return []
        order_no = self._order_number()
        lines = []
        for _ in range(self.random.randint(1, 3)):
            collection = self.random.choice(pool)
            sku = self.random.choice(collection.skus)
            lines.append(self._line(dealer, collection, sku, self.random.randint(1, 3), day, order_no))
        return lines

    def project_order(self, dealer: Dealer, day: date) -> List[RawOrder]:
        """Deep job-site order: one or two SKUs in quantity"""
        available = [c for c in self.collections if c.launched <= day]
        if not available:
            return []
        collection = self.random.choice(available)
        order_no = self._order_number()
        skus = self.random.sample(collection.skus, k=min(len(collection.skus), self.random.randint(1, 2)))
        return [self._line(dealer, collection, sku, self.random.randint(6, 24), day, order_no) for sku in skus]

    def generate(self, start: date, end: date) -> Tuple[List[RawOrder], Dict[str, List[RawOrder]]]:
        """
        Generate orders between start and end.

        Returns:
            (all order lines, stocking lines per customer id)
        """
        weeks = max((end - start).days // 7, 1)
        orders: List[RawOrder] = []
        stocking: Dict[str, List[RawOrder]] = {}

        for dealer in self.dealers:
            setup_day = start + timedelta(days=int(self.rng.integers(0, 28)))
            setup = self.stocking_order(dealer, setup_day)
            stocking[dealer.customer_id] = setup
            orders.extend(setup)
            favourites = sorted({line.collection_name for line in setup})
            favourite_collections = [c for c in self.collections if c.name in favourites]

            replenishments = self.rng.poisson(lam=dealer.activity, size=weeks)
            for week, count in enumerate(replenishments):
                for _ in range(int(count)):
                    day = start + timedelta(days=week * 7 + int(self.rng.integers(0, 7)))
                    if day > end:
                        continue
                    pool = favourite_collections if self.random.random() < 0.7 else []
                    orders.extend(self.replenishment_order(dealer, day, pool))

            for _ in range(int(self.rng.poisson(lam=2))):
                day = start + timedelta(days=int(self.rng.integers(0, max((end - start).days, 1))))
                orders.extend(self.project_order(dealer, day))

        orders.sort(key=lambda o: (o.order_date, o.customer_id, o.order_number or ""))
        return orders, stocking


class DisplayGenerator:
    """Generate floor displays from stocking orders"""

    def __init__(self, py_random: random.Random):
        self.random = py_random

    def generate(self, stocking: Dict[str, List[RawOrder]], as_of: date) -> List[DisplayRecord]:
        """One display per stocked SKU, mostly active"""
        statuses = [s for s, _ in DISPLAY_STATUSES]
        weights = [w for _, w in DISPLAY_STATUSES]
        displays = []
        for customer_id, lines in stocking.items():
            for line in lines:
                status = self.random.choices(statuses, weights=weights)[0]
                displays.append(DisplayRecord(
                    sku=line.sku,
                    collection_name=line.collection_name,
                    customer_id=customer_id,
                    installed_at=line.order_date + timedelta(days=self.random.randint(3, 14)),
                    status=status,
                    last_verified_at=as_of - timedelta(days=self.random.randint(0, 60)),
                    faces=1 if self.random.random() < 0.8 else 2,
                ))
        return displays


# =============================================================================
# MAIN GENERATOR
# =============================================================================

class TerritoryGenerator:
    """
    Seeded territory generator.

    The same seed and dates always produce the same dataset.

    Example:
        dataset = TerritoryGenerator(seed=42).generate(end_date=date(2025, 11, 4))
    """

    def __init__(self, seed: int = 42):
        self.seed = seed
        self.fake = Faker()
        self.fake.seed_instance(seed)
        self.rng = np.random.default_rng(seed)
        self.random = random.Random(seed)

    def generate(
        self,
        n_dealers: int = 12,
        n_collections: int = 20,
        end_date: Optional[date] = None,
        days: int = 365,
    ) -> TerritoryDataset:
        """Generate a complete territory ending at end_date (default today)"""
        end = end_date or date.today()
        start = end - timedelta(days=days)

        dealers = DealerGenerator(self.fake, self.rng).generate(n_dealers)
        collections = CollectionGenerator(self.fake, self.rng, self.random).generate(n_collections, start, end)
        orders, stocking = OrderGenerator(dealers, collections, self.rng, self.random).generate(start, end)
        displays = DisplayGenerator(self.random).generate(stocking, end)
        catalog = [
            CatalogEntry(sku=sku, collection_name=c.name, unit_price=c.prices[sku], product_name=c.descriptions[sku])
            for c in collections
            for sku in c.skus
        ]

        return TerritoryDataset(
            dealers=dealers,
            collections=collections,
            orders=orders,
            displays=displays,
            catalog=catalog,
        )
