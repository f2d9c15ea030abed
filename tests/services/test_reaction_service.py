from __future__ import annotations

import asyncio
from uuid import uuid4

import pytest

from edustats.core.errors import InvalidIdentifier, NotFound, ValidationError
from edustats.models.material import Material
from edustats.models.reaction import Reaction, ReactionKind, ReactionTarget
from edustats.repos.material_repo import InMemoryMaterialRepo
from edustats.repos.reaction_repo import InMemoryReactionRepo
from edustats.services import reaction_service


@pytest.fixture
def reactions() -> InMemoryReactionRepo:
    return InMemoryReactionRepo()


@pytest.fixture
def materials() -> InMemoryMaterialRepo:
    return InMemoryMaterialRepo()


def _material(materials: InMemoryMaterialRepo) -> Material:
    m = Material.new(title="Limits", description="d", formula="f", example="e")
    asyncio.run(materials.add(m))
    return m


def _save(user, kind, target, *, reactions, materials, **ref) -> Reaction:
    return asyncio.run(
        reaction_service.save_reaction(
            user, kind, target, reactions=reactions, materials=materials, **ref
        )
    )


def test_save_material_reaction(
    reactions: InMemoryReactionRepo, materials: InMemoryMaterialRepo
) -> None:
    user = uuid4()
    m = _material(materials)
    saved = _save(
        user,
        ReactionKind.HAPPY,
        ReactionTarget.MATERIAL,
        material_id=str(m.id),
        reactions=reactions,
        materials=materials,
    )
    assert saved.material_id == m.id
    assert saved.practice_code is None
    assert saved.target_key == str(m.id)
    assert asyncio.run(reactions.list_by_user(user)) == [saved]


def test_second_reaction_updates_in_place(
    reactions: InMemoryReactionRepo, materials: InMemoryMaterialRepo
) -> None:
    user = uuid4()
    kw = {"practice_code": "P-1", "reactions": reactions, "materials": materials}
    first = _save(user, ReactionKind.SAD, ReactionTarget.PRACTICE, **kw)
    second = _save(user, ReactionKind.HAPPY, ReactionTarget.PRACTICE, **kw)

    assert second.id == first.id
    assert second.created_at == first.created_at
    assert second.updated_at >= first.updated_at
    assert asyncio.run(reactions.list_by_user(user)) == [second]


def test_practice_code_is_trimmed(
    reactions: InMemoryReactionRepo, materials: InMemoryMaterialRepo
) -> None:
    saved = _save(
        uuid4(),
        ReactionKind.NEUTRAL,
        ReactionTarget.PRACTICE,
        practice_code=" P-1 ",
        reactions=reactions,
        materials=materials,
    )
    assert saved.practice_code == "P-1"


@pytest.mark.parametrize(
    "target,ref,message",
    [
        (ReactionTarget.MATERIAL, {}, "Material ID is required"),
        (ReactionTarget.MATERIAL, {"material_id": "nope"}, "Material ID is invalid"),
        (
            ReactionTarget.MATERIAL,
            {"material_id": str(uuid4())},
            "Material not found",
        ),
        (ReactionTarget.PRACTICE, {}, "Practice code is required"),
        (ReactionTarget.PRACTICE, {"practice_code": ""}, "Practice code is required"),
    ],
)
def test_save_rejects_bad_reference(
    reactions: InMemoryReactionRepo,
    materials: InMemoryMaterialRepo,
    target: ReactionTarget,
    ref: dict,
    message: str,
) -> None:
    user = uuid4()
    with pytest.raises(ValidationError) as exc_info:
        _save(
            user,
            ReactionKind.HAPPY,
            target,
            reactions=reactions,
            materials=materials,
            **ref,
        )
    assert exc_info.value.message == message
    assert asyncio.run(reactions.list_by_user(user)) == []


def test_get_and_remove(
    reactions: InMemoryReactionRepo, materials: InMemoryMaterialRepo
) -> None:
    user = uuid4()
    m = _material(materials)
    saved = _save(
        user,
        ReactionKind.CONFUSED,
        ReactionTarget.MATERIAL,
        material_id=str(m.id),
        reactions=reactions,
        materials=materials,
    )

    found = asyncio.run(
        reaction_service.get_reaction(
            user, ReactionTarget.MATERIAL, str(m.id).upper(), reactions=reactions
        )
    )
    assert found == saved

    asyncio.run(
        reaction_service.remove_reaction(
            user, ReactionTarget.MATERIAL, str(m.id), reactions=reactions
        )
    )
    with pytest.raises(NotFound, match="Reaction not found"):
        asyncio.run(
            reaction_service.remove_reaction(
                user, ReactionTarget.MATERIAL, str(m.id), reactions=reactions
            )
        )


def test_get_missing_reaction_is_not_found(reactions: InMemoryReactionRepo) -> None:
    with pytest.raises(NotFound, match="Reaction not found"):
        asyncio.run(
            reaction_service.get_reaction(
                uuid4(), ReactionTarget.PRACTICE, "P-1", reactions=reactions
            )
        )


def test_malformed_material_key_is_invalid_identifier(
    reactions: InMemoryReactionRepo,
) -> None:
    with pytest.raises(InvalidIdentifier, match="Material not found"):
        asyncio.run(
            reaction_service.get_reaction(
                uuid4(), ReactionTarget.MATERIAL, "123", reactions=reactions
            )
        )


def test_reaction_rejects_mismatched_reference() -> None:
    r = Reaction.new(user_id=uuid4(), reaction=ReactionKind.HAPPY, practice_code="P")
    with pytest.raises(TypeError):
        Reaction(
            id=r.id,
            user_id=r.user_id,
            reaction=r.reaction,
            target=ReactionTarget.MATERIAL,
            material_id=None,
            practice_code="P",
            created_at=r.created_at,
            updated_at=r.updated_at,
        )
