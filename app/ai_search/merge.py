"""Priority merge of candidate IDs from the three retrieval steps."""
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Sequence


class Provenance(str, Enum):
    """Which retrieval step contributed a candidate ID."""
    BIO = "bio"
    SKILL = "skill"
    KEYWORD = "keyword"


# Earlier entries win when an ID appears in several result sets.
MERGE_PRIORITY = (Provenance.BIO, Provenance.SKILL, Provenance.KEYWORD)


@dataclass(frozen=True)
class MatchCandidate:
    """A merged candidate ID tagged with the step that contributed it."""
    candidate_id: int
    provenance: Provenance


def merge_candidate_ids(
    bio_ids: Sequence[int],
    skill_ids: Sequence[int],
    keyword_ids: Sequence[int],
    limit: int,
) -> List[MatchCandidate]:
    """
    Concatenate bio, skill and keyword IDs in that priority, dropping IDs
    already seen, and truncate to `limit`.

    Order within each group is preserved; rank across groups is never
    compared, e.g. bio [5, 9] + skill [9, 12] -> [5, 9, 12].
    """
    merged: List[MatchCandidate] = []
    seen = set()
    groups: Iterable = zip(MERGE_PRIORITY, (bio_ids, skill_ids, keyword_ids))
    for provenance, ids in groups:
        for candidate_id in ids:
            if candidate_id in seen:
                continue
            seen.add(candidate_id)
            merged.append(MatchCandidate(candidate_id, provenance))

    return merged[:max(limit, 0)]
