# dao/supplier_recommendation.py
"""Rank suppliers for quote lines, per category group and per line."""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Tuple
from dao import catalog as catalog_dao
from dao import supplier as supplier_dao
from dao import supplier_performance as perf_dao
from dao import supplier_price as price_dao
from schemas.recommendation import (
    CategoryRecommendation,
    ClassifiedItem,
    Coverage,
    DEFAULT_SUPPLIER_WEIGHTS,
    FulfillableItem,
    ItemRecommendation,
    ItemSupplierScore,
    LineItemRequest,
    PriceRow,
    RatingStats,
    ReliabilityStats,
    SupplierScore,
    SupplierWeights,
)

logger = logging.getLogger(__name__)

TOP_SUPPLIERS_PER_CATEGORY = 3
TOP_SUPPLIERS_PER_ITEM = 5
PARTIAL_COVERAGE_LIMIT = 3
TIED_RANGE_SCORE = 50.0

MULTI_ITEM_BONUS_PER_ITEM = 2  # percent
MULTI_ITEM_BONUS_MAX = 10  # percent


# ---------- numeric helpers ----------
def round_half_up(value: float, places: int = 0) -> Decimal:
    exp = Decimal(1).scaleb(-places)
    return Decimal(str(value)).quantize(exp, rounding=ROUND_HALF_UP)


def min_max_score(value: float, lo: float, hi: float) -> float:
    """100 for the lowest value, 0 for the highest, 50 when all are equal."""
    if hi == lo:
        return TIED_RANGE_SCORE
    return (hi - value) / (hi - lo) * 100


def weighted_score(
    price_score: float,
    rating_score: float,
    delivery_score: float,
    reliability_pct: float,
    weights: SupplierWeights,
) -> float:
    w = weights.normalized()
    return (
        price_score * w.price / 100
        + rating_score * w.rating / 100
        + delivery_score * w.delivery_time / 100
        + reliability_pct * w.reliability / 100
    )


def rating_score(avg_rating: float) -> float:
    return avg_rating / 5 * 100


def assign_ranks(scores: list) -> list:
    """Highest score first, lower supplier id wins ties; ranks start at 1."""
    scores.sort(key=lambda s: (-s.total_score, s.supplier_id))
    for idx, s in enumerate(scores, 1):
        s.rank = idx
    return scores


# ---------- coverage ----------
def build_coverage(
    items: List[ClassifiedItem], prices: Dict[int, List[PriceRow]]
) -> Dict[int, Coverage]:
    coverage: Dict[int, Coverage] = {}
    for item in items:
        for row in prices.get(item.unit_id, []):
            cov = coverage.get(row.supplier_id)
            if cov is None:
                cov = Coverage(supplier_id=row.supplier_id)
                coverage[row.supplier_id] = cov
            cov.can_fulfill.append(
                FulfillableItem(
                    line_item_id=item.line_item_id,
                    unit_id=item.unit_id,
                    price_per_unit=row.price_per_unit,
                    delivery_days=row.delivery_days,
                )
            )
            cov.total_price += row.price_per_unit * item.quantity
            # the group ships together, so the slowest item decides
            cov.max_delivery_days = max(cov.max_delivery_days, row.delivery_days)
    return coverage


def full_coverage_suppliers(
    coverage: Dict[int, Coverage], unit_ids: Iterable[int]
) -> List[Coverage]:
    needed = set(unit_ids)
    return sorted(
        (c for c in coverage.values() if needed <= c.covered_unit_ids()),
        key=lambda c: c.supplier_id,
    )


def partial_coverage_fallback(
    coverage: Dict[int, Coverage], limit: int = PARTIAL_COVERAGE_LIMIT
) -> List[Coverage]:
    """Degraded mode when nobody covers the whole group: best coverage first."""
    ranked = sorted(
        coverage.values(),
        key=lambda c: (-len(c.covered_unit_ids()), c.supplier_id),
    )
    return ranked[:limit]


def select_candidates(
    coverage: Dict[int, Coverage], unit_ids: Iterable[int]
) -> Tuple[List[Coverage], bool]:
    """(candidates, is_full_coverage). Never mixes full and partial suppliers."""
    full = full_coverage_suppliers(coverage, unit_ids)
    if full:
        return full, True
    return partial_coverage_fallback(coverage), False


# ---------- scoring ----------
def score_candidates(
    candidates: List[Coverage],
    full_coverage: bool,
    names: Dict[int, Dict],
    reliabilities: Dict[int, ReliabilityStats],
    ratings: Dict[int, RatingStats],
    weights: SupplierWeights,
) -> List[SupplierScore]:
    scores: List[SupplierScore] = []
    for cov in candidates:
        info = names.get(cov.supplier_id)
        if info is None:
            logger.warning("Supplier %s has prices but no account, skipping", cov.supplier_id)
            continue
        rel = reliabilities.get(cov.supplier_id) or ReliabilityStats(
            reliability_pct=perf_dao.DEFAULT_RELIABILITY_PCT
        )
        rat = ratings.get(cov.supplier_id) or RatingStats(avg_rating=perf_dao.DEFAULT_RATING)
        scores.append(
            SupplierScore(
                supplier_id=cov.supplier_id,
                supplier_name=info["name"],
                supplier_company=info.get("company"),
                avg_rating=float(round_half_up(rat.avg_rating, 1)),
                total_price=float(round_half_up(cov.total_price, 2)),
                avg_delivery_days=cov.max_delivery_days,
                reliability_pct=int(round_half_up(rel.reliability_pct)),
                full_coverage=full_coverage,
                can_fulfill=cov.can_fulfill,
            )
        )
    if not scores:
        return scores

    prices = [s.total_price for s in scores]
    deliveries = [s.avg_delivery_days for s in scores]
    lo_p, hi_p = min(prices), max(prices)
    lo_d, hi_d = min(deliveries), max(deliveries)

    for s in scores:
        raw = weighted_score(
            min_max_score(s.total_price, lo_p, hi_p),
            rating_score(s.avg_rating),
            min_max_score(s.avg_delivery_days, lo_d, hi_d),
            s.reliability_pct,
            weights,
        )
        s.total_score = int(round_half_up(raw))
    return assign_ranks(scores)


# ---------- public APIs ----------
def recommend_by_category(
    items: List[LineItemRequest], weights: Optional[SupplierWeights] = None
) -> List[CategoryRecommendation]:
    weights = weights or DEFAULT_SUPPLIER_WEIGHTS
    groups = catalog_dao.group_by_category(catalog_dao.classify(items))
    if not groups:
        return []

    all_units = set()
    for g in groups:
        all_units |= g.unit_ids
    prices = price_dao.get_supplier_prices_for(all_units)

    selections = []
    candidate_ids = set()
    for g in groups:
        coverage = build_coverage(g.items, prices)
        candidates, full = select_candidates(coverage, g.unit_ids)
        selections.append((g, candidates, full))
        candidate_ids |= {c.supplier_id for c in candidates}

    # one grouped read per metric for every candidate of every category
    reliabilities = perf_dao.reliability_for(candidate_ids)
    ratings = perf_dao.rating_for(candidate_ids)
    names = supplier_dao.supplier_names(candidate_ids)

    out: List[CategoryRecommendation] = []
    for g, candidates, full in selections:
        scored = score_candidates(candidates, full, names, reliabilities, ratings, weights)
        if not full and scored:
            logger.info(
                "No supplier covers all of category %s, showing %d partial options",
                g.category_name,
                len(scored),
                extra={"category_id": g.category_id},
            )
        out.append(
            CategoryRecommendation(
                category_id=g.category_id,
                category_name=g.category_name,
                items=g.items,
                suppliers=scored[:TOP_SUPPLIERS_PER_CATEGORY],
            )
        )
    return out


def recommend_by_item(
    items: List[LineItemRequest], weights: Optional[SupplierWeights] = None
) -> List[ItemRecommendation]:
    weights = weights or DEFAULT_SUPPLIER_WEIGHTS
    classified = catalog_dao.classify(items)
    if not classified:
        return []

    prices = price_dao.get_supplier_prices_for({c.unit_id for c in classified.values()})

    units_by_supplier: Dict[int, set] = {}
    for unit_id, rows in prices.items():
        for row in rows:
            units_by_supplier.setdefault(row.supplier_id, set()).add(unit_id)

    supplier_ids = set(units_by_supplier)
    reliabilities = perf_dao.reliability_for(supplier_ids)
    ratings = perf_dao.rating_for(supplier_ids)
    names = supplier_dao.supplier_names(supplier_ids)

    out: List[ItemRecommendation] = []
    for item in classified.values():
        scores: List[ItemSupplierScore] = []
        for row in prices.get(item.unit_id, []):
            info = names.get(row.supplier_id)
            if info is None:
                continue
            others = len(units_by_supplier[row.supplier_id]) - 1
            scores.append(
                ItemSupplierScore(
                    supplier_id=row.supplier_id,
                    supplier_name=info["name"],
                    supplier_company=info.get("company"),
                    avg_rating=float(round_half_up(ratings[row.supplier_id].avg_rating, 1)),
                    price_per_unit=row.price_per_unit,
                    delivery_days=row.delivery_days,
                    reliability_pct=int(
                        round_half_up(reliabilities[row.supplier_id].reliability_pct)
                    ),
                    can_fulfill_other_items=others,
                    multi_item_bonus=min(
                        others * MULTI_ITEM_BONUS_PER_ITEM, MULTI_ITEM_BONUS_MAX
                    ),
                )
            )

        if scores:
            unit_prices = [s.price_per_unit for s in scores]
            days = [s.delivery_days for s in scores]
            lo_p, hi_p = min(unit_prices), max(unit_prices)
            lo_d, hi_d = min(days), max(days)
            for s in scores:
                base = weighted_score(
                    min_max_score(s.price_per_unit, lo_p, hi_p),
                    rating_score(s.avg_rating),
                    min_max_score(s.delivery_days, lo_d, hi_d),
                    s.reliability_pct,
                    weights,
                )
                s.total_score = int(round_half_up(base * (1 + s.multi_item_bonus / 100)))
            assign_ranks(scores)

        out.append(
            ItemRecommendation(
                line_item_id=item.line_item_id,
                unit_id=item.unit_id,
                product_name=item.product_name,
                category_name=item.category_name,
                quantity=item.quantity,
                suppliers=scores[:TOP_SUPPLIERS_PER_ITEM],
            )
        )
    return out
