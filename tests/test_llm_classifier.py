import asyncio
from typing import Any, Optional

import pytest
from langchain_core.language_models import BaseChatModel
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from app.core.intents import IntentKind
from app.core.settings import AppSettings, LLMSettings
from app.intent import build_classifier
from app.intent.llm import LanguageModelClassifier
from app.intent.rules import RuleBasedClassifier
from app.llm.client import LLMClient
from app.llm.router import LLMRouter
from app.workflow.compiler import PlanCompiler


class UnavailableChatModel(FakeListChatModel):
    async def _agenerate(self, *args: Any, **kwargs: Any):
        raise RuntimeError("provider unavailable")


class SlowChatModel(FakeListChatModel):
    async def _agenerate(self, *args: Any, **kwargs: Any):
        await asyncio.sleep(1)
        return await super()._agenerate(*args, **kwargs)


def make_classifier(*responses):
    model = FakeListChatModel(responses=list(responses))
    return LanguageModelClassifier(model, fallback=RuleBasedClassifier(), provider="fake", timeout_seconds=2)


@pytest.mark.asyncio
async def test_llm_schedule_intent():
    classifier = make_classifier(
        '{"kind": "schedule", "action": "Summarize", "source": "gmail", "cron_expression": "0 7 * * *"}'
    )
    intent = await classifier.classify("summarize my gmail every morning at 7")

    assert intent.kind == IntentKind.SCHEDULE
    assert intent.action == "summarize"
    assert intent.cron_expression == "0 7 * * *"
    assert intent.provider == "fake"


@pytest.mark.asyncio
async def test_llm_json_in_markdown_fence():
    classifier = make_classifier('```json\n{"kind": "run_now", "immediate_target_name": "gmail_latest"}\n```')
    intent = await classifier.classify("what's my latest gmail")

    assert intent.kind == IntentKind.RUN_NOW
    assert intent.immediate_target_name == "gmail_latest"


@pytest.mark.asyncio
async def test_llm_bad_cron_is_rebuilt_from_prompt():
    classifier = make_classifier('{"kind": "schedule", "action": "summarize", "source": "gmail", "cron_expression": "daily"}')
    intent = await classifier.classify("summarize my gmail daily at 6pm")
    assert intent.cron_expression == "0 18 * * *"


@pytest.mark.asyncio
async def test_llm_run_now_without_target_uses_rule():
    classifier = make_classifier('{"kind": "run_now"}')
    intent = await classifier.classify("run backup now")
    assert intent.immediate_target_name == "backup"


@pytest.mark.asyncio
async def test_llm_unknown_kind_is_coerced():
    classifier = make_classifier('{"kind": "make_coffee", "cron_expression": "0 9 * * *"}')
    intent = await classifier.classify("make me coffee")

    assert intent.kind == IntentKind.UNKNOWN
    assert intent.cron_expression is None


@pytest.mark.asyncio
async def test_invalid_json_falls_back_to_rules():
    classifier = make_classifier("Sure! I think this is a schedule.")
    intent = await classifier.classify("summarize my gmail every day at 9am")

    assert intent.provider == "heuristic"
    assert intent.kind == IntentKind.SCHEDULE
    assert intent.cron_expression == "0 9 * * *"


@pytest.mark.asyncio
async def test_non_object_json_falls_back_to_rules():
    classifier = make_classifier('["schedule"]')
    intent = await classifier.classify("hi")

    assert intent.provider == "heuristic"
    assert intent.kind == IntentKind.CHAT


@pytest.mark.asyncio
async def test_model_error_falls_back_to_rules():
    model = UnavailableChatModel(responses=['{"kind": "chat"}'])
    classifier = LanguageModelClassifier(model, fallback=RuleBasedClassifier(), provider="fake", timeout_seconds=2)

    intent = await classifier.classify("run sales report now")

    assert intent.provider == "heuristic"
    assert intent.kind == IntentKind.RUN_NOW
    assert intent.immediate_target_name == "sales"


@pytest.mark.asyncio
async def test_slow_model_times_out_to_rules():
    model = SlowChatModel(responses=['{"kind": "chat"}'])
    classifier = LanguageModelClassifier(model, fallback=RuleBasedClassifier(), provider="fake", timeout_seconds=0.05)

    intent = await classifier.classify("summarize my gmail every day at 9am")

    assert intent.provider == "heuristic"
    assert intent.kind == IntentKind.SCHEDULE


@pytest.mark.asyncio
async def test_llm_service_names_are_normalised(platform_settings):
    classifier = make_classifier(
        '{"kind": "schedule", "action": "summarize", "source": "Email", "cron_expression": "0 8 * * *"}'
    )
    intent = await classifier.classify("give me an email digest every day at 8am")

    assert intent.source == "gmail"
    plan = PlanCompiler(platform_settings).compile(intent)
    assert plan.supported
    assert plan.flow_to_create.path == "f/automations/gmail_daily_summary"


class FakeClient(LLMClient):
    def __init__(self, configured: bool, label: str):
        self.configured = configured
        self.label = label

    def get_chat_model(self, model_name: Optional[str] = None, temperature: float = 0.0) -> BaseChatModel:
        return FakeListChatModel(responses=[self.label])

    def is_configured(self) -> bool:
        return self.configured


def make_router(settings, **configured):
    return LLMRouter(settings, clients={name: FakeClient(flag, name) for name, flag in configured.items()})


def test_router_prefers_primary():
    settings = AppSettings(llm=LLMSettings(primary_provider="anthropic", fallback_provider="groq"))
    router = make_router(settings, anthropic=True, groq=True)
    model, provider = router.get_chat_model()
    assert provider == "anthropic"


def test_router_falls_back_in_order():
    settings = AppSettings(llm=LLMSettings(primary_provider="anthropic", fallback_provider="groq"))
    router = make_router(settings, anthropic=False, groq=False, gemini=True)
    assert router.provider_chain() == ["anthropic", "groq", "gemini"]
    _, provider = router.get_chat_model()
    assert provider == "gemini"


def test_router_without_credentials():
    settings = AppSettings(llm=LLMSettings())
    router = make_router(settings, anthropic=False, groq=False)
    assert router.get_chat_model() is None


def test_build_classifier_selection():
    enabled = AppSettings(llm=LLMSettings(enabled=True))
    disabled = AppSettings(llm=LLMSettings(enabled=False))

    assert isinstance(build_classifier(disabled, make_router(disabled, groq=True)), RuleBasedClassifier)
    assert isinstance(build_classifier(enabled, make_router(enabled, groq=False)), RuleBasedClassifier)

    classifier = build_classifier(enabled, make_router(enabled, groq=True))
    assert isinstance(classifier, LanguageModelClassifier)
    assert classifier.name == "groq"
