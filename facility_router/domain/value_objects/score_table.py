"""ScoreTable — per-call keyword match scores keyed by skill group and issue code."""

from __future__ import annotations

from dataclasses import dataclass

from facility_router.domain.value_objects.enums import SkillGroup


@dataclass(frozen=True)
class IssueScore:
    skill_group: SkillGroup
    issue_code: str
    score: int
    match_count: int
    longest_keyword: int
    order: int  # position of the issue code in the dictionary


@dataclass(frozen=True)
class ScoreTable:
    """Immutable score snapshot produced by one rule-engine run.

    Only issue codes with at least one match are stored; every dictionary
    skill group is kept in ``skill_groups`` so that zero-score groups still
    count as candidates for the entropy computation.
    """

    skill_groups: tuple[SkillGroup, ...]
    issues: tuple[IssueScore, ...] = ()

    def group_score(self, group: SkillGroup) -> int:
        return sum(i.score for i in self.issues if i.skill_group == group)

    def group_scores(self) -> dict[SkillGroup, int]:
        return {g: self.group_score(g) for g in self.skill_groups}

    def issues_for(self, group: SkillGroup) -> list[IssueScore]:
        return sorted(
            (i for i in self.issues if i.skill_group == group),
            key=lambda i: i.order,
        )

    def best_issue(self, group: SkillGroup) -> IssueScore | None:
        """Most keyword matches wins; ties go to the longest matched keyword.

        Remaining ties keep dictionary order.
        """
        best: IssueScore | None = None
        for issue in self.issues_for(group):
            if best is None:
                best = issue
            elif issue.match_count > best.match_count:
                best = issue
            elif issue.match_count == best.match_count and issue.longest_keyword > best.longest_keyword:
                best = issue
        return best

    def total(self) -> int:
        return sum(i.score for i in self.issues)

    def ranked_groups(self) -> list[tuple[SkillGroup, int]]:
        """Groups with a positive score, best first (precedence order breaks ties)."""
        scored = [(g, self.group_score(g)) for g in self.skill_groups]
        return sorted((gs for gs in scored if gs[1] > 0), key=lambda gs: -gs[1])

    def as_dict(self) -> dict[str, int]:
        """Flat ``{skill_group|issue_code: score}`` view, as sent to the reasoning service."""
        flat: dict[str, int] = {g.value: s for g, s in self.group_scores().items()}
        for issue in self.issues:
            flat[issue.issue_code] = issue.score
        return flat
