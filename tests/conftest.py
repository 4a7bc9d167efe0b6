"""Pytest fixtures and fakes for alerts tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest

from alerts.bus import HandlerRegistry
from alerts.core import TriggerClassifier
from alerts.engine import AlertDispatcher, AlertRuleStore, Renderer, SimpleEvalEvaluator
from shared.models import MessageFormat


@dataclass
class FakeActor:
    name: str = "Ann"
    display_name: str = "§aAnn_the_Great"
    unique_id: str = "0f1e2d3c"
    world_name: str = "world"
    ping: int = 42


@dataclass
class FakeGuild:
    name: str = "Home"


@dataclass
class FakeChannel:
    name: str
    id: int
    guild: Any = None

    def __repr__(self) -> str:
        return f"#{self.name}"


class RecordingScheduler:
    """Collects submitted tasks; run them explicitly with run_all()."""

    def __init__(self) -> None:
        self.tasks: list[tuple[Any, tuple]] = []

    def submit(self, fn, *args):
        self.tasks.append((fn, args))

    def run_all(self) -> None:
        tasks, self.tasks = self.tasks, []
        for fn, args in tasks:
            fn(*args)


class InlineScheduler:
    def __init__(self) -> None:
        self.submitted = 0

    def submit(self, fn, *args):
        self.submitted += 1
        return fn(*args)


class RecordingDelivery:
    def __init__(self) -> None:
        self.direct: list[tuple[Any, str | None, Any]] = []
        self.webhook: list[tuple[Any, str | None, str | None, str | None, Any]] = []
        self.fail_on: set[str] = set()

    def deliver_direct(self, channel, content, embed) -> None:
        if channel.name in self.fail_on:
            raise RuntimeError(f"cannot send to {channel.name}")
        self.direct.append((channel, content, embed))

    def deliver_webhook(self, channel, username, avatar_url, content, embed) -> None:
        self.webhook.append((channel, username, avatar_url, content, embed))


class CountingChannelResolver:
    """Resolver over fixed tables that counts calls per strategy."""

    def __init__(
        self,
        game: dict[str, list] | None = None,
        by_name: dict[str, list] | None = None,
        by_id: dict[str, list] | None = None,
    ) -> None:
        self.game = game or {}
        self.by_name = by_name or {}
        self.by_id = by_id or {}
        self.calls: dict[str, int] = {"game": 0, "name": 0, "id": 0}

    def game_channel(self, name):
        self.calls["game"] += 1
        return list(self.game.get(name, []))

    def channels_by_name(self, name):
        self.calls["name"] += 1
        return list(self.by_name.get(name, []))

    def channel_by_id(self, channel_id):
        self.calls["id"] += 1
        return list(self.by_id.get(channel_id, []))


class FakeBridge:
    def __init__(self) -> None:
        self.client = object()
        self.main_guild = FakeGuild()
        self.bot_avatar_url = "https://cdn.example/bot.png"
        self.bot_name = "AlertBot"
        self.emote_guilds: list[Any] = []

    def translate_emotes(self, text, guild):
        self.emote_guilds.append(guild)
        return text.replace(":wave:", "<:wave:1>")

    def translate_message(self, message_format: MessageFormat, translator):
        rendered = message_format.translate(translator)
        return rendered.content, {"title": rendered.title}


class RecordingWebhookSender:
    def __init__(self) -> None:
        self.sent: list[tuple[MessageFormat, str]] = []

    def send(self, message_format, url) -> None:
        self.sent.append((message_format, url))


@dataclass
class DispatcherFixture:
    dispatcher: AlertDispatcher
    store: AlertRuleStore
    resolver: CountingChannelResolver
    delivery: RecordingDelivery
    scheduler: Any
    detached: list = field(default_factory=list)

    def load(self, *rule_defs: dict) -> None:
        self.store.reload(list(rule_defs))


@pytest.fixture
def actor() -> FakeActor:
    return FakeActor()


@pytest.fixture
def registry() -> HandlerRegistry:
    return HandlerRegistry()


@pytest.fixture
def classifier() -> TriggerClassifier:
    return TriggerClassifier()


@pytest.fixture
def channels() -> dict[str, FakeChannel]:
    guild = FakeGuild()
    return {
        "global": FakeChannel("global", 100, guild),
        "staff": FakeChannel("staff", 200, guild),
        "logs": FakeChannel("logs", 300, guild),
    }


@pytest.fixture
def resolver(channels) -> CountingChannelResolver:
    return CountingChannelResolver(
        game={"global": [channels["global"]]},
        by_name={"staff": [channels["staff"]], "logs": [channels["logs"]]},
        by_id={"300": [channels["logs"]]},
    )


@pytest.fixture
def make_dispatcher(resolver):
    """Build a dispatcher over fakes; keyword arguments go to AlertDispatcher."""

    def _make(scheduler=None, **kwargs) -> DispatcherFixture:
        store = AlertRuleStore(TriggerClassifier())
        delivery = kwargs.pop("delivery", RecordingDelivery())
        scheduler = scheduler or InlineScheduler()
        evaluator = SimpleEvalEvaluator()
        renderer = kwargs.pop(
            "renderer",
            Renderer(evaluator, bridge=kwargs.get("bridge"), server=kwargs.get("server")),
        )
        detached: list = []
        dispatcher = AlertDispatcher(
            store,
            resolver,
            delivery,
            renderer,
            evaluator,
            scheduler,
            detach=detached.append,
            **kwargs,
        )
        return DispatcherFixture(dispatcher, store, resolver, delivery, scheduler, detached)

    return _make
