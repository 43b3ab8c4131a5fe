"""Consumer groups and the partitions assigned to their members."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class GroupMember:
    """A consumer in a group and the partitions it has been assigned."""

    member_id: str
    assigned_partitions: list[int] = field(default_factory=list)


@dataclass
class ConsumerGroup:
    """A named set of consumers sharing the partitions of a topic."""

    group_id: str
    members: dict[str, GroupMember] = field(default_factory=dict)
    partition_assignment: dict[int, str] = field(default_factory=dict)

    def add_member(self, member_id: str) -> None:
        """Add a member with no partitions, replacing any existing one of that id."""
        self.members[member_id] = GroupMember(member_id)

    def remove_member(self, member_id: str) -> None:
        """Remove a member and release every partition assigned to it."""
        self.members.pop(member_id, None)
        self.partition_assignment = {
            partition: owner
            for partition, owner in self.partition_assignment.items()
            if owner != member_id
        }

    def get_assigned_partitions(self, member_id: str) -> list[int] | None:
        """Return the member's assigned partitions, or None if it is not in the group."""
        member = self.members.get(member_id)
        return member.assigned_partitions if member is not None else None