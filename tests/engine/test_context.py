"""Tests for Context snapshots and group context construction."""

from __future__ import annotations

import httpx
import pytest

from arbor.core.errors import ConstructError, PresetError
from arbor.data.models import GroupConfig
from arbor.engine.context import Context, ContextConstructor
from arbor.engine.registry import NamedRegistry
from arbor.preset import HeaderPresetter, PresetType
from arbor.roundtrip.models import RoundTrip


@pytest.fixture
def presetters() -> NamedRegistry:
    registry = NamedRegistry("presetter")
    registry.register(HeaderPresetter(PresetType.REQUEST), HeaderPresetter(PresetType.RESPONSE))
    return registry


@pytest.fixture
def constructor(executor, presetters) -> ContextConstructor:
    return ContextConstructor(executor, presetters)


def config(**data) -> GroupConfig:
    return GroupConfig.model_validate(data)


LOGIN_FLOW = [
    {
        "description": "login",
        "request": {"method": "POST", "path": "/login"},
        "response": {"statusCode": 200, "variables": {"token": "body.token"}},
    }
]


# ---------------------------------------------------------------------------
# Snapshot / restore
# ---------------------------------------------------------------------------


class TestSnapshot:
    def test_restore_resets_all_fields(self):
        template = RoundTrip.model_validate({"request": {"path": "/a"}})
        context = Context(variables={"a": 1}, cleaner_name="c1", template=template)
        snap = context.snapshot()

        context.bind({"a": 2, "b": 3})
        context.cleaner_name = "c2"
        context.template = None
        context.restore(snap)

        assert context.variables == {"a": 1}
        assert context.cleaner_name == "c1"
        assert context.template is template

    def test_snapshot_is_deep(self):
        context = Context(variables={"items": [1]})
        snap = context.snapshot()
        context.variables["items"].append(2)
        context.restore(snap)
        assert context.variables == {"items": [1]}

    def test_restore_in_place(self):
        context = Context(variables={"a": 1})
        variables = context.variables
        snap = context.snapshot()
        context.bind({"b": 2})
        context.restore(snap)
        assert context.variables is variables

    def test_bind_overwrites(self):
        context = Context(variables={"a": 1})
        context.bind({"a": 2})
        assert context.variables == {"a": 2}


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestConstruct:
    def test_full_runs_setup_flow(self, constructor, context, transport):
        transport.routes[("POST", "/login")] = httpx.Response(200, json={"token": "t1"})

        captured = constructor.construct(
            context, config(cleaner="db-reset", flow=LOGIN_FLOW), partial=False
        )

        assert captured == {"token": "t1"}
        assert context.variables == {"token": "t1"}
        assert context.cleaner_name == "db-reset"
        assert len(transport.calls("POST", "/login")) == 1

    def test_partial_skips_setup_flow(self, constructor, context, transport):
        captured = constructor.construct(
            context,
            config(flow=LOGIN_FLOW),
            partial=True,
            setup_variables={"token": "t1"},
        )

        assert captured == {"token": "t1"}
        assert context.variables == {"token": "t1"}
        assert transport.requests == []

    def test_template_merged_onto_inherited(self, constructor, context):
        context.template = RoundTrip.model_validate(
            {"request": {"method": "POST", "headers": {"X-Outer": "1"}}}
        )
        constructor.construct(
            context,
            config(roundTripTemplate={"request": {"path": "/inner", "headers": {"X-Inner": "2"}}}),
            partial=True,
        )
        assert context.template.request.method == "POST"
        assert context.template.request.path == "/inner"
        assert context.template.request.headers == {"X-Outer": "1", "X-Inner": "2"}

    def test_no_template_keeps_inherited(self, constructor, context):
        inherited = RoundTrip.model_validate({"request": {"path": "/outer"}})
        context.template = inherited
        constructor.construct(context, config(), partial=False)
        assert context.template is inherited

    def test_cleaner_not_inherited(self, constructor, context):
        context.cleaner_name = "outer-cleaner"
        constructor.construct(context, config(), partial=False)
        assert context.cleaner_name is None

    def test_presetters_applied(self, constructor, context):
        constructor.construct(
            context,
            config(
                presetters=[
                    {"name": "request-header", "args": {"Content-Type": "application/json"}},
                    {"name": "response-header", "args": {"Content-Type": "application/json"}},
                ],
                roundTripTemplate={"request": {"headers": {"Content-Type": "text/plain"}}},
            ),
            partial=True,
        )
        assert context.template.request.headers == {"Content-Type": "text/plain"}
        assert context.template.response.headers == {"Content-Type": "application/json"}

    def test_unknown_presetter(self, constructor, context):
        with pytest.raises(PresetError, match="unknown presetter 'nope'"):
            constructor.construct(context, config(presetters=[{"name": "nope"}]), partial=False)

    def test_setup_flow_failure(self, constructor, context, transport):
        transport.routes[("POST", "/login")] = httpx.Response(401)
        with pytest.raises(ConstructError, match="setup flow of 'auth' failed") as exc:
            constructor.construct(context, config(summary="auth", flow=LOGIN_FLOW), partial=False)
        assert exc.value.context.group == "auth"
