"""Simulated payloads returned by the provider bridge.

Each provider maps to a generator producing a payload of fixed shape with
randomized values. Generators receive the requested tool name and arguments.
"""
from __future__ import annotations

import random
import time
from typing import Any, Callable, Dict, Mapping

ResultGenerator = Callable[[str, Mapping[str, Any]], Dict[str, Any]]

_GENERATORS: Dict[str, ResultGenerator] = {}


def result_generator(*provider_ids: str) -> Callable[[ResultGenerator], ResultGenerator]:
    """Register the decorated function for one or more provider ids."""

    def decorator(func: ResultGenerator) -> ResultGenerator:
        for provider_id in provider_ids:
            _GENERATORS[provider_id] = func
        return func

    return decorator


def fallback_result(tool_name: str, args: Mapping[str, Any]) -> Dict[str, Any]:
    return {"status": "executed", "data": dict(args)}


def generate_result(provider_id: str, tool_name: str, args: Mapping[str, Any]) -> Dict[str, Any]:
    generator = _GENERATORS.get(provider_id, fallback_result)
    return generator(tool_name, args)


def has_generator(provider_id: str) -> bool:
    return provider_id in _GENERATORS


@result_generator("jira")
def _jira(tool_name: str, args: Mapping[str, Any]) -> Dict[str, Any]:
    if tool_name == "create_backlog_item":
        ticket_id = f"KLOUD-{random.randint(0, 8999)}"
        return {
            "ticket_id": ticket_id,
            "status": "TO DO",
            "assignee": "UNASSIGNED",
            "url": f"https://jira.kloud.io/browse/{ticket_id}",
        }
    return {
        "sprint_name": "Orchestra Alpha",
        "velocity": random.randint(30, 60),
        "completion_rate": f"{random.randint(70, 100)}%",
        "blockers": random.randint(0, 4),
    }


@result_generator("miro")
def _miro(tool_name: str, args: Mapping[str, Any]) -> Dict[str, Any]:
    if tool_name == "create_miro_sticky":
        return {
            "item_id": f"MIRO-{random.randint(0, 9999)}",
            "content": args.get("content"),
            "status": "CREATED",
        }
    return {
        "board_id": args.get("board_id") or "B-992",
        "widgets": random.randint(5, 60),
        "last_modified": f"{random.randint(1, 59)}m ago",
    }


@result_generator("seo_perf")
def _seo_perf(tool_name: str, args: Mapping[str, Any]) -> Dict[str, Any]:
    anomalies = []
    if tool_name == "analyze_keywords":
        anomalies.append("Keyword cannibalization detected on /pricing")
    return {
        "lighthouse_performance": random.randint(75, 100),
        "seo_score": random.randint(70, 100),
        "first_contentful_paint": f"{random.uniform(0.8, 2.5):.1f}s",
        "top_keyword_rank": random.randint(1, 20),
        "anomalies": anomalies,
    }


@result_generator("grafana")
def _grafana(tool_name: str, args: Mapping[str, Any]) -> Dict[str, Any]:
    incidents = []
    if tool_name == "list_active_incidents":
        incidents.append({"id": f"INC-{random.randint(100, 999)}", "severity": "P2", "title": "High Memory on Node-4"})
    return {
        "p99_latency": f"{random.randint(80, 250)}ms",
        "error_rate": f"{random.uniform(0.0, 0.5):.2f}%",
        "active_pods": random.randint(12, 48),
        "health_status": "HEALTHY",
        "active_incidents": incidents,
    }


@result_generator("figma")
def _figma(tool_name: str, args: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "tokens": {"primary": "#9d5ce9", "secondary": "#050214", "corner_radius": "1.5rem"},
        "audit_score": random.randint(80, 100),
        "accessibility_violations": random.randint(0, 3),
    }


@result_generator("slack")
def _slack(tool_name: str, args: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "status": "message_delivered",
        "channel": args.get("channel") or "#ops-center",
        "ts": int(time.time() * 1000),
    }


@result_generator("postgres")
def _postgres(tool_name: str, args: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "row_count": random.randint(1_000_000, 2_000_000),
        "anomalies": 0,
        "last_vacuum": f"{random.randint(1, 12)} hours ago",
        "scan_result": "CLEAN",
    }


@result_generator("aws")
def _aws(tool_name: str, args: Mapping[str, Any]) -> Dict[str, Any]:
    if tool_name == "get_aws_spend":
        spend = random.uniform(800, 2000)
        return {"amount": f"${spend:,.2f}", "period": "MTD", "forecast": f"${spend * 1.45:,.2f}"}
    return {"buckets": ["prod-assets", "backup-vault"], "encryption": "AES-256"}


@result_generator("stripe")
def _stripe(tool_name: str, args: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "volume": f"${random.uniform(20_000, 60_000):,.2f}",
        "subscriptions": random.randint(100, 200),
        "churn": f"{random.uniform(1.0, 4.0):.1f}%",
    }


@result_generator("google_search")
def _google_search(tool_name: str, args: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "query": args.get("query"),
        "top_results": [
            {
                "title": "State of Cloud 2024",
                "snippet": "Autonomous agents are projected to drive 40% of delivery...",
                "link": "https://gartner.com",
            },
            {
                "title": "Competitor Moat Analysis",
                "snippet": "Key competitors are lacking integrated MCP protocols...",
                "link": "https://analyst.io",
            },
        ],
    }


@result_generator("meta", "linkedin")
def _social_post(tool_name: str, args: Mapping[str, Any]) -> Dict[str, Any]:
    return {"status": "published", "activity_id": f"ACT_{int(time.time() * 1000)}"}


@result_generator("instagram")
def _instagram(tool_name: str, args: Mapping[str, Any]) -> Dict[str, Any]:
    if tool_name == "post_instagram_video":
        return {
            "status": "success",
            "media_id": f"IG_VIDEO_{random.randint(0, 999_999)}",
            "permalink": "https://instagram.com/p/mock-video-id",
            "caption_delivered": args.get("caption"),
        }
    return fallback_result(tool_name, args)


@result_generator("github")
def _github(tool_name: str, args: Mapping[str, Any]) -> Dict[str, Any]:
    pr_id = random.randint(1, 500)
    return {"pr_id": pr_id, "url": f"https://github.com/kloud/pull/{pr_id}", "status": "OPEN"}


@result_generator("playwright")
def _playwright(tool_name: str, args: Mapping[str, Any]) -> Dict[str, Any]:
    total = random.randint(8, 40)
    return {
        "status": "passed",
        "total": total,
        "failures": 0,
        "duration": f"{random.uniform(2.0, 9.0):.1f}s",
    }
