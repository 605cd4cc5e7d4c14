import re

import pytest

from verdict.models import AnalysisTemplate, CommentatorStyle, EvidenceMode, TemplateSide
from verdict.storage import TemplateRepository, generate_template_id


def make_template(template_id, created_at=1, **kwargs):
    return AnalysisTemplate(
        id=template_id,
        title=kwargs.pop("title", f"Template {template_id}"),
        sides=[TemplateSide(label="Partner A", placeholder="Your view"), TemplateSide(label="Partner B")],
        created_at=created_at,
        **kwargs
    )


def test_template_id_format():
    assert re.fullmatch(r"template_1718193600000_[0-9a-z]{5}", generate_template_id(1718193600000))


@pytest.mark.asyncio
async def test_templates_are_capped(store, clock):
    repository = TemplateRepository(store, cap=2, clock=clock)
    for index in range(3):
        await repository.save_template(make_template(f"t{index}"))

    assert [template.id for template in await repository.load_templates()] == ["t2", "t1"]


@pytest.mark.asyncio
async def test_mark_used_tracks_popularity(templates, clock):
    await templates.save_template(make_template("t1"))
    await templates.save_template(make_template("t2"))
    await templates.save_template(make_template("t3"))

    await templates.mark_template_used("t1")
    clock.advance(ms=10)
    used = await templates.mark_template_used("t3")
    clock.advance(ms=10)
    await templates.mark_template_used("t3")

    assert used.use_count == 1
    assert (await templates.get_template("t3")).use_count == 2
    recent = await templates.get_recent_templates()
    assert [template.id for template in recent] == ["t3", "t1"]
    assert await templates.mark_template_used("missing") is None


@pytest.mark.asyncio
async def test_update_template_fields(templates):
    await templates.save_template(make_template("t1"))

    updated = await templates.update_template("t1", {"title": "Roommates", "commentatorStyle": "lawyer"})

    assert updated.title == "Roommates"
    assert updated.commentator_style == CommentatorStyle.LAWYER
    assert updated.evidence_mode == EvidenceMode.LIGHT
    assert updated.sides[0].placeholder == "Your view"
    assert await templates.update_template("missing", {"title": "x"}) is None


@pytest.mark.asyncio
async def test_update_template_rejects_bookkeeping_fields(templates):
    await templates.save_template(make_template("t1"))

    with pytest.raises(ValueError, match="useCount"):
        await templates.update_template("t1", {"useCount": 99})


@pytest.mark.asyncio
async def test_delete_and_summaries(templates):
    await templates.save_template(make_template("t1", commentator_style="coach"))
    await templates.save_template(make_template("t2"))

    assert await templates.delete_template("t2") is True
    assert await templates.delete_template("t2") is False

    summaries = await templates.get_template_summaries()
    assert len(summaries) == 1
    assert summaries[0].side_count == 2
    assert summaries[0].commentator_style == CommentatorStyle.COACH


@pytest.mark.asyncio
async def test_invalid_template_records_are_ignored(templates, store):
    await store.save(templates.key, [{"id": "broken"}, make_template("t1").to_dict()])
    assert [template.id for template in await templates.load_templates()] == ["t1"]
