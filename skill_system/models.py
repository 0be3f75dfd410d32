from enum import Enum
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

import skill_graph


class SkillCategory(str, Enum):
    COMBAT = "combat"
    MAGIC = "magic"
    SUPPORT = "support"
    SPECIAL = "special"
    ADVANCED = "advanced"


class Skill(BaseModel):
    """Represents a single skill node in the graph."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    category: SkillCategory
    level: int = Field(default=0, ge=0)
    xp_required: int = Field(default=0, ge=0)
    description: str = ""

    def __repr__(self):
        return f"Skill(id='{self.id}', name='{self.name}')"


class PrerequisiteEdge(BaseModel):
    """`from_id` must be masterable before `to_id` is reachable via this edge."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_id: str = Field(alias="from")
    to_id: str = Field(alias="to")


class SkillGraph:
    """Manages the skill catalog and the prerequisite edges between skills."""

    def __init__(self):
        self.skills: Dict[str, Skill] = {}  # Maps skill id -> Skill object

        # --- Relationship Attributes ---
        # What skills does this one UNLOCK? Lists keep edge insertion order.
        self.unlocks: Dict[str, List[str]] = {}

        # What skills are needed BEFORE this one? (inverse of unlocks)
        self.requires: Dict[str, List[str]] = {}

    @classmethod
    def build(cls, skills: Iterable[Skill], edges: Iterable[PrerequisiteEdge]) -> "SkillGraph":
        """Builds the forward and reverse adjacency from a catalog snapshot.

        Duplicate edges are stored once and self-loops are dropped. Edges may
        reference ids missing from the catalog; they still take part in
        traversal and are reported when a path is resolved against skills.
        """
        graph = cls()
        for skill in skills:
            graph.add_skill(skill)
        for edge in edges:
            graph.add_dependency(edge.from_id, edge.to_id)
        return graph

    def add_skill(self, skill: Skill):
        """Adds a Skill object to the graph."""
        if skill.id not in self.skills:
            self.skills[skill.id] = skill

    def add_dependency(self, source_skill_id: str, target_skill_id: str):
        """This is for the REQUIRES relationship: source must come before target."""
        if source_skill_id == target_skill_id:
            return
        targets = self.unlocks.setdefault(source_skill_id, [])
        if target_skill_id in targets:
            return
        targets.append(target_skill_id)
        self.requires.setdefault(target_skill_id, []).append(source_skill_id)

    def skill(self, skill_id: str) -> Optional[Skill]:
        return self.skills.get(skill_id)

    def __contains__(self, skill_id):
        return skill_id in self.skills

    def shortest_path(self, source_id: str, target_id: str) -> List[str]:
        """Shortest prerequisite path between two skills.

        The source is excluded and the target included. Returns an empty list
        when the target cannot be reached or source and target are the same.
        Ties follow edge insertion order.
        """
        return skill_graph.bfs_shortest_path(self.unlocks, source_id, target_id)

    def reachable_next_skills(self, mastered_ids: Iterable[str]) -> List[str]:
        """Skills one hop away from the mastered set that are not yet mastered."""
        return skill_graph.one_hop_frontier(self.unlocks, list(mastered_ids))

    def get_prerequisites(self, skill_id: str) -> List[str]:
        """All direct and indirect prerequisites of a skill, depth first."""
        return skill_graph.dfs_iterative(self.requires, skill_id)[1:]

    def get_skills_unlocked_by(self, skill_id: str) -> List[str]:
        """All skills that a given skill is (transitively) a prerequisite for."""
        return skill_graph.bfs(self.unlocks, skill_id)[1:]

    def get_skill_dependencies(self, skill_id: str) -> List[str]:
        return list(self.requires.get(skill_id, []))

    def get_skill_unlocks(self, skill_id: str) -> List[str]:
        return list(self.unlocks.get(skill_id, []))

    def find_skills_within_steps(self, skill_id: str, max_steps: int) -> List[str]:
        """Skills within max_steps hops of skill_id, following edges both ways."""
        undirected = {}
        for source, targets in self.unlocks.items():
            for target in targets:
                undirected.setdefault(source, []).append(target)
                undirected.setdefault(target, []).append(source)
        return skill_graph.nodes_within_steps(undirected, skill_id, max_steps)
