from __future__ import annotations

import logging
from uuid import UUID

from edustats.core.errors import NotFound, ValidationError
from edustats.core.metrics import REACTIONS_SAVED
from edustats.models.ids import parse_id
from edustats.models.reaction import Reaction, ReactionKind, ReactionTarget
from edustats.repos.material_repo import MaterialRepo
from edustats.repos.reaction_repo import ReactionRepo

logger = logging.getLogger(__name__)


async def save_reaction(
    user_id: str | UUID,
    reaction: ReactionKind,
    target: ReactionTarget,
    material_id: str | None = None,
    practice_code: str | None = None,
    *,
    reactions: ReactionRepo,
    materials: MaterialRepo,
) -> Reaction:
    """Create the user's reaction on a target, or change the existing one.

    Material reactions must point at a material in the catalog.  Practice
    codes are taken as given.
    """
    uid = parse_id(user_id, what="User")

    if target is ReactionTarget.MATERIAL:
        if not material_id:
            raise ValidationError("Material ID is required")
        try:
            mid = parse_id(material_id, what="Material")
        except NotFound:
            raise ValidationError("Material ID is invalid") from None
        if await materials.get(mid) is None:
            raise ValidationError("Material not found")
        candidate = Reaction.new(user_id=uid, reaction=reaction, material_id=mid)
    else:
        code = (practice_code or "").strip()
        if not code:
            raise ValidationError("Practice code is required")
        candidate = Reaction.new(user_id=uid, reaction=reaction, practice_code=code)

    existing = await reactions.get(uid, target, candidate.target_key)
    saved = candidate if existing is None else existing.with_reaction(reaction)
    await reactions.save(saved)

    REACTIONS_SAVED.labels(target=target.value, reaction=reaction.value).inc()
    logger.info(
        "Reaction %s user=%s target=%s key=%s reaction=%s",
        "created" if existing is None else "changed",
        uid,
        target.value,
        saved.target_key,
        reaction.value,
    )
    return saved


def _target_key(target: ReactionTarget, raw: str) -> str:
    if target is ReactionTarget.MATERIAL:
        return str(parse_id(raw, what="Material"))
    return raw


async def get_reaction(
    user_id: str | UUID,
    target: ReactionTarget,
    raw_key: str,
    *,
    reactions: ReactionRepo,
) -> Reaction:
    uid = parse_id(user_id, what="User")
    found = await reactions.get(uid, target, _target_key(target, raw_key))
    if found is None:
        raise NotFound("Reaction not found")
    return found


async def list_reactions(
    user_id: str | UUID, *, reactions: ReactionRepo
) -> list[Reaction]:
    """All reactions of one user, most recently changed first."""
    return await reactions.list_by_user(parse_id(user_id, what="User"))


async def remove_reaction(
    user_id: str | UUID,
    target: ReactionTarget,
    raw_key: str,
    *,
    reactions: ReactionRepo,
) -> None:
    uid = parse_id(user_id, what="User")
    key = _target_key(target, raw_key)
    if not await reactions.delete(uid, target, key):
        raise NotFound("Reaction not found")
    logger.info("Reaction removed user=%s target=%s key=%s", uid, target.value, key)
