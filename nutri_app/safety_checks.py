from typing import List
from nutri_app.data_model import Recommendation
from nutri_app.supplement_catalog import SupplementCatalog

INTERACTION_FLAG = "⚠️ 함께 복용 시 주의: {names}"


def _lists_interaction(interactions: List[str], other_name: str) -> bool:
    # catalog terms are product-style names, e.g. "칼슘제" for 칼슘
    return any(term.strip().startswith(other_name) for term in interactions)


def attach_interaction_flags(
    recommendations: List[Recommendation],
    catalog: SupplementCatalog,
) -> List[Recommendation]:
    """
    Flags pairs of recommended supplements that the catalog lists as
    interacting, in either direction. Items are never removed.
    """
    for rec in recommendations:
        entry = catalog.get(rec.supplement_id)
        own_interactions = entry.interactions if entry else []
        interacting = set()

        for other in recommendations:
            if other.supplement_id == rec.supplement_id:
                continue
            other_entry = catalog.get(other.supplement_id)
            other_interactions = other_entry.interactions if other_entry else []

            if _lists_interaction(own_interactions, other.name):
                interacting.add(other.name)
            if _lists_interaction(other_interactions, rec.name):
                interacting.add(other.name)

        if interacting:
            flag = INTERACTION_FLAG.format(names=", ".join(sorted(interacting)))
            if flag not in rec.validation_flags:
                rec.validation_flags.append(flag)

    return recommendations
