from __future__ import annotations

import pytest

from guildsmith.blueprint import Blueprint
from guildsmith.engine.builder import BlueprintBuilder
from guildsmith.engine.results import StepStatus
from guildsmith.errors import BuildError
from guildsmith.services.resource_state_store import ResourceState
from guildsmith.templates import load_template
from guildsmith.testing.fakes import http_error


def _blueprint(**overrides) -> Blueprint:
    data = {
        "name": "Test",
        "roles": [{"key": "r1", "name": "Admin", "color": "#ff0000", "permPack": "admin"}],
        "categories": [
            {
                "key": "c1",
                "name": "Info",
                "overwrites": [
                    {"target": "@everyone", "deny": ["SendMessages"]},
                    {"targetRoleKey": "r1", "allow": ["SendMessages"]},
                ],
                "channels": [{"key": "ch1", "name": "Welcome Area!"}],
            },
        ],
        "messages": [{"channelKey": "ch1", "type": "text", "content": "hi"}],
    }
    data.update(overrides)
    return Blueprint.from_dict(data)


@pytest.mark.asyncio
async def test_build_creates_and_records_every_key(guild, store, builder):
    result = await builder.build(guild, _blueprint())

    assert result.ok
    assert guild.call_names() == [
        "create_role",
        "edit_role_positions",
        "create_category",
        "create_text_channel",
        "send",
    ]
    assert guild.calls[3][1] == "welcome-area"

    state = await store.load(guild.id)
    assert set(state.roles) == {"r1"}
    assert set(state.categories) == {"c1"}
    assert set(state.channels) == {"ch1"}
    assert guild.get_channel(state.channels["ch1"]).sent == [{"content": "hi", "embed": None}]


@pytest.mark.asyncio
async def test_category_overrides_resolve_to_live_targets(guild, builder):
    await builder.build(guild, _blueprint())

    category = guild.categories[0]
    admin = next(r for r in guild.roles if r.name == "Admin")
    assert category.overwrites[guild.default_role].send_messages is False
    assert category.overwrites[admin].send_messages is True


@pytest.mark.asyncio
async def test_role_permissions_and_colour_come_from_blueprint(guild, builder):
    await builder.build(guild, _blueprint())

    admin = next(r for r in guild.roles if r.name == "Admin")
    assert admin.colour.value == 0xFF0000
    assert admin.permissions.manage_channels
    assert not admin.permissions.administrator


@pytest.mark.asyncio
async def test_roles_are_laddered_below_bot_role(guild, builder):
    await builder.build(guild, load_template("roblox_standard_v1"))

    top = guild.me.top_role.position
    ordered = [r.name for r in sorted(guild.roles, key=lambda r: -r.position) if r.position < top and not r.is_default()]
    assert ordered[:3] == ["Owner", "Admin", "Moderator"]


@pytest.mark.asyncio
async def test_duplicate_role_key_keeps_later_declaration(guild, store, builder):
    bp = _blueprint(roles=[{"key": "r1", "name": "First"}, {"key": "r1", "name": "Second"}])
    await builder.build(guild, bp)

    state = await store.load(guild.id)
    assert guild.get_role(state.roles["r1"]).name == "Second"
    assert guild.call_names().count("create_role") == 2


@pytest.mark.asyncio
async def test_positioning_failure_is_not_fatal(guild, builder):
    guild.fail("edit_role_positions", http_error(403, "Missing Permissions"))

    result = await builder.build(guild, _blueprint())

    assert result.ok
    statuses = {s.step: s.status for s in result.steps}
    assert statuses["Role positions"] is StepStatus.IGNORED_FAILURE
    assert "send" in guild.call_names()
    assert any("(ignored)" in line for line in result.summary_lines())


@pytest.mark.asyncio
async def test_fatal_failure_keeps_partial_state(guild, store, builder):
    guild.fail("create_text_channel", http_error(500, "boom"))

    with pytest.raises(BuildError) as exc:
        await builder.build(guild, _blueprint())

    assert exc.value.step == "Categories"
    assert "send" not in guild.call_names()
    state = await store.load(guild.id)
    assert set(state.roles) == {"r1"}
    assert set(state.categories) == {"c1"}
    assert state.channels == {}


@pytest.mark.asyncio
async def test_rerun_reuses_existing_resources(guild, store, builder):
    await builder.build(guild, _blueprint())
    first = await store.load(guild.id)
    guild.calls.clear()

    result = await builder.build(guild, _blueprint())

    assert result.created == {"roles": 0, "categories": 0, "channels": 0}
    assert result.reused == {"roles": 1, "categories": 1, "channels": 1}
    assert not [c for c in guild.call_names() if c.startswith("create_")]
    assert (await store.load(guild.id)).to_dict() == first.to_dict()


@pytest.mark.asyncio
async def test_rerun_recreates_deleted_resources(guild, store, builder):
    await builder.build(guild, _blueprint())
    state = await store.load(guild.id)
    guild.remove(guild.get_channel(state.channels["ch1"]))
    guild.calls.clear()

    result = await builder.build(guild, _blueprint())

    assert result.created["channels"] == 1
    assert result.reused["roles"] == 1
    assert (await store.load(guild.id)).channels["ch1"] != state.channels["ch1"]


@pytest.mark.asyncio
async def test_reuse_can_be_disabled(guild, store):
    builder = BlueprintBuilder(store, reuse_existing=False)
    await builder.build(guild, _blueprint())
    result = await builder.build(guild, _blueprint())

    assert result.created["roles"] == 1
    assert guild.call_names().count("create_role") == 2


@pytest.mark.asyncio
async def test_messages_for_voice_or_unknown_channels_are_skipped(guild, builder):
    bp = _blueprint(
        categories=[{
            "key": "c1",
            "name": "Voice",
            "channels": [{"key": "vc", "name": "Hangout", "type": "voice"}],
        }],
        messages=[
            {"channelKey": "vc", "type": "text", "content": "hello"},
            {"channelKey": "nowhere", "type": "text", "content": "hello"},
        ],
    )
    result = await builder.build(guild, bp)

    assert result.messages_sent == 0
    assert result.messages_skipped == 2
    assert "send" not in guild.call_names()
    assert guild.voice_channels[0].name == "Hangout"


@pytest.mark.asyncio
async def test_unreachable_stored_channel_skips_message(guild, store, builder):
    await store.save(guild.id, ResourceState(channels={"old": 987654}))
    guild.fail("fetch_channel", http_error(403, "Missing Access"))

    result = await builder.build(guild, _blueprint(
        messages=[{"channelKey": "old", "type": "text", "content": "hello"}],
    ))

    assert result.ok
    assert result.messages_sent == 0
    assert result.messages_skipped == 1
    assert "send" not in guild.call_names()


@pytest.mark.asyncio
async def test_embed_messages_use_title_and_description(guild, builder):
    bp = _blueprint(messages=[{"channelKey": "ch1", "type": "embed", "title": "Hi", "description": "Body"}])
    await builder.build(guild, bp)

    embed = guild.text_channels[0].sent[0]["embed"]
    assert (embed.title, embed.description) == ("Hi", "Body")


@pytest.mark.asyncio
async def test_channel_options_are_passed_through(guild, builder):
    bp = _blueprint(categories=[{
        "key": "c1",
        "name": "Info",
        "channels": [{"key": "ch1", "name": "General", "topic": "Chat", "slowmode": 99999}],
    }])
    await builder.build(guild, bp)

    channel = guild.text_channels[0]
    assert channel.topic == "Chat"
    assert channel.slowmode_delay == 21600


@pytest.mark.asyncio
async def test_minimal_blueprint_end_to_end(guild, store, builder):
    bp = Blueprint.from_dict({
        "name": "Minimal",
        "roles": [{"key": "r1", "name": "Mods", "permPack": "mod"}],
        "categories": [{"key": "c1", "name": "Info", "channels": [{"key": "ch1", "name": "Welcome Area!"}]}],
    })
    await builder.build(guild, bp)

    state = await store.load(guild.id)
    assert guild.get_channel(state.channels["ch1"]).name == "welcome-area"
    assert set(state.roles) == {"r1"}
    assert set(state.categories) == {"c1"}


@pytest.mark.asyncio
async def test_channel_level_overrides_are_applied(guild, builder):
    bp = _blueprint(categories=[{
        "key": "c1",
        "name": "Info",
        "channels": [{
            "key": "ch1",
            "name": "announcements",
            "overwrites": [{"target": "@everyone", "deny": ["SendMessages"]}],
        }],
    }])
    await builder.build(guild, bp)

    channel = guild.text_channels[0]
    assert channel.overwrites_for(guild.default_role).send_messages is False


@pytest.mark.asyncio
async def test_keys_from_earlier_builds_are_kept(guild, store, builder):
    await builder.build(guild, _blueprint())
    other = Blueprint.from_dict({"name": "Extra", "roles": [{"key": "r2", "name": "Extra"}]})
    await builder.build(guild, other)

    state = await store.load(guild.id)
    assert set(state.roles) == {"r1", "r2"}
    assert set(state.channels) == {"ch1"}
