# SPDX-License-Identifier: MIT

from typing import Optional, TypedDict

from eventline.model.entity_id import EntityId


class Member(TypedDict):
    user_id: EntityId
    full_name: Optional[str]
    display_name: Optional[str]
    role: Optional[str]


class Department(TypedDict):
    id: EntityId
    name: str


def member_name(member: Member) -> str:
    return member["full_name"] or member["display_name"] or member["user_id"]


def member_name_map(members: list[Member]) -> dict[EntityId, str]:
    return {member["user_id"]: member_name(member) for member in members}
