"""Static agent roster and the registry used to look agents up."""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from orchestra.core.models import (
    DELEGATE_FUNCTION_NAME,
    INTERNAL_ORCHESTRA_PROVIDER,
    Agent,
    Category,
    Tool,
)

SUPERVISOR_AGENT_ID = "supervisor-agent"


def _string(description: str) -> Dict[str, Any]:
    return {"type": "string", "description": description}


def _schema(properties: Dict[str, Dict[str, Any]], required: Sequence[str] = ()) -> Dict[str, Any]:
    return {"type": "object", "properties": properties, "required": list(required)}


def _tool(name: str, description: str, provider: str, parameters: Dict[str, Any]) -> Tool:
    return Tool(name=name, description=description, provider=provider, parameters=parameters)


DELEGATE_TOOL = _tool(
    DELEGATE_FUNCTION_NAME,
    "Hands off a specific sub-task to a specialized agent and waits for their expert output.",
    INTERNAL_ORCHESTRA_PROVIDER,
    _schema(
        {"agent_id": _string("Agent ID"), "task": _string("Instructions for the agent.")},
        required=["agent_id", "task"],
    ),
)

POST_INSTAGRAM_VIDEO = _tool(
    "post_instagram_video",
    "Posts a video to Instagram with a specific caption.",
    "instagram",
    _schema(
        {
            "video_url": _string("The public URL of the video to post."),
            "caption": _string("The caption for the Instagram post."),
        },
        required=["video_url", "caption"],
    ),
)
GET_SEO_REPORT = _tool(
    "get_seo_report",
    "Fetches lighthouse and SEO performance scores for the production site.",
    "seo_perf",
    _schema({"domain": _string("Target domain")}, required=["domain"]),
)
ANALYZE_KEYWORDS = _tool(
    "analyze_keywords",
    "Audits keyword rankings and flags cannibalization across site pages.",
    "seo_perf",
    _schema(
        {
            "domain": _string("Target domain"),
            "keywords": {
                "type": "array",
                "description": "Keywords to audit.",
                "items": {"type": "string"},
            },
        },
        required=["domain"],
    ),
)
CREATE_BACKLOG_ITEM = _tool(
    "create_backlog_item",
    "Creates a new Jira backlog item and returns its ticket identifier.",
    "jira",
    _schema(
        {
            "summary": _string("One-line summary of the work item."),
            "description": _string("Detailed description and acceptance criteria."),
            "priority": _string("Priority such as Highest, High, Medium or Low."),
        },
        required=["summary"],
    ),
)
GET_SPRINT_STATUS = _tool(
    "get_sprint_status",
    "Reports velocity, completion rate and blockers for the active sprint.",
    "jira",
    _schema({"board_id": _string("Jira board identifier.")}),
)
CREATE_MIRO_STICKY = _tool(
    "create_miro_sticky",
    "Adds a sticky note to a Miro board.",
    "miro",
    _schema(
        {"board_id": _string("Miro board identifier."), "content": _string("Text of the sticky note.")},
        required=["content"],
    ),
)
GET_MIRO_BOARD = _tool(
    "get_miro_board",
    "Summarizes the widgets and recent activity of a Miro board.",
    "miro",
    _schema({"board_id": _string("Miro board identifier.")}),
)
GET_SERVICE_HEALTH = _tool(
    "get_service_health",
    "Reads p99 latency, error rate and pod health from Grafana.",
    "grafana",
    _schema({"service": _string("Service name as labelled in Grafana.")}),
)
LIST_ACTIVE_INCIDENTS = _tool(
    "list_active_incidents",
    "Lists open incidents with their severity.",
    "grafana",
    _schema({"severity": _string("Minimum severity, e.g. P1 or P2.")}),
)
AUDIT_DESIGN_TOKENS = _tool(
    "audit_design_tokens",
    "Extracts design tokens from a Figma file and audits accessibility.",
    "figma",
    _schema({"file_key": _string("Figma file key.")}, required=["file_key"]),
)
SEND_SLACK_MESSAGE = _tool(
    "send_slack_message",
    "Posts a message to a Slack channel.",
    "slack",
    _schema(
        {"channel": _string("Channel name, e.g. #ops-center."), "text": _string("Message text.")},
        required=["text"],
    ),
)
SCAN_TABLE_INTEGRITY = _tool(
    "scan_table_integrity",
    "Runs an integrity scan over a production PostgreSQL table.",
    "postgres",
    _schema({"table": _string("Fully qualified table name.")}, required=["table"]),
)
GET_AWS_SPEND = _tool(
    "get_aws_spend",
    "Returns month-to-date AWS spend and the end-of-month forecast.",
    "aws",
    _schema({"period": _string("Billing period, defaults to MTD.")}),
)
LIST_S3_BUCKETS = _tool(
    "list_s3_buckets",
    "Lists S3 buckets and their encryption settings.",
    "aws",
    _schema({}),
)
GET_REVENUE_METRICS = _tool(
    "get_revenue_metrics",
    "Reads payment volume, active subscriptions and churn from Stripe.",
    "stripe",
    _schema({"period": _string("Reporting period, e.g. last_30_days.")}),
)
WEB_SEARCH = _tool(
    "web_search",
    "Searches the web and returns the top results.",
    "google_search",
    _schema({"query": _string("Search query.")}, required=["query"]),
)
PUBLISH_FACEBOOK_POST = _tool(
    "publish_facebook_post",
    "Publishes a post on the company Facebook page.",
    "meta",
    _schema({"message": _string("Post body.")}, required=["message"]),
)
PUBLISH_LINKEDIN_POST = _tool(
    "publish_linkedin_post",
    "Publishes an update on the company LinkedIn page.",
    "linkedin",
    _schema({"message": _string("Post body.")}, required=["message"]),
)
OPEN_PULL_REQUEST = _tool(
    "open_pull_request",
    "Opens a pull request on GitHub.",
    "github",
    _schema(
        {
            "repository": _string("Repository in owner/name form."),
            "title": _string("Pull request title."),
            "branch": _string("Source branch."),
        },
        required=["repository", "title", "branch"],
    ),
)
RUN_E2E_SUITE = _tool(
    "run_e2e_suite",
    "Runs a Playwright end-to-end suite and reports the outcome.",
    "playwright",
    _schema({"suite": _string("Suite name or tag.")}, required=["suite"]),
)


def _agent(
    id: str,
    name: str,
    role: str,
    category: Category,
    description: str,
    system_prompt: str,
    tools: Iterable[Tool] = (),
    sample_prompts: Iterable[str] = (),
) -> Agent:
    return Agent(
        id=id,
        name=name,
        role=role,
        category=category,
        description=description,
        system_prompt=system_prompt,
        tools=tuple(tools),
        sample_prompts=tuple(sample_prompts),
    )


AGENTS: Tuple[Agent, ...] = (
    # Orchestration
    _agent(
        SUPERVISOR_AGENT_ID,
        "The Conductor",
        "Chief Orchestra Supervisor",
        Category.ORCHESTRATION,
        "Autonomous coordinator that manages complex requests by delegating to specialized agents.",
        "You are the master supervisor. Break requests down and delegate to specialized agents.",
        tools=[DELEGATE_TOOL],
        sample_prompts=[
            "Ask the Code Agent to outline the caching layer refactor.",
            "Get a sprint status update and share it with the SRE Agent.",
        ],
    ),
    # Strategy, value & governance
    _agent("strategy-agent", "Strategy Agent", "Strategic Advisor", Category.STRATEGY,
           "Aligns product initiatives with long-term company goals.",
           "Focus on long-term strategy and competitive positioning.", tools=[WEB_SEARCH]),
    _agent("value-agent", "Business Value Agent", "Value Architect", Category.STRATEGY,
           "Calculates ROI and builds the business case for new features.",
           "Focus on business value, KPIs, and ROI modeling.", tools=[GET_REVENUE_METRICS]),
    _agent("pricing-agent", "Pricing Agent", "Economics Lead", Category.STRATEGY,
           "Handles unit economics and pricing strategy.",
           "Analyze unit economics and market pricing tiers."),
    _agent("risk-agent", "Risk Agent", "RAID Coordinator", Category.STRATEGY,
           "Manages the RAID log and Architectural Decision Records (ADR).",
           "Identify risks, assumptions, issues, and dependencies."),
    _agent("approval-agent", "Approval Agent", "Governance Gatekeeper", Category.STRATEGY,
           "Provides recommendations for executive sign-off.",
           "Review inputs and provide a clear recommendation for approval."),
    # Discovery & product
    _agent("discovery-agent", "Discovery Agent", "Discovery Lead", Category.DISCOVERY,
           "Facilitates problem discovery and solution ideation.",
           "Lead discovery workshops and problem space mapping.",
           tools=[GET_MIRO_BOARD, CREATE_MIRO_STICKY]),
    _agent("pm-agent", "Product Manager", "Product Lead", Category.DISCOVERY,
           "Owns product vision, Jira backlogs, and Miro boards.",
           "Translate vision into actionable roadmaps and backlog items.",
           tools=[CREATE_BACKLOG_ITEM, GET_SPRINT_STATUS, CREATE_MIRO_STICKY]),
    _agent("research-agent", "User Research Agent", "Insights Researcher", Category.DISCOVERY,
           "Synthesizes user research and feedback into actionable insights.",
           "Analyze user behavior data and research findings.", tools=[WEB_SEARCH]),
    _agent("backlog-agent", "Refinement Agent", "Backlog Specialist", Category.DISCOVERY,
           "Keeps the backlog refined, estimated, and ready for development.",
           "Focus on story readiness and definition of ready.", tools=[CREATE_BACKLOG_ITEM]),
    # Design & UX
    _agent("design-agent", "Design Agent", "UI/UX Architect", Category.DESIGN,
           "Ensures UI/UX consistency and high design standards.",
           "Create user-centric designs and wireframes.", tools=[GET_MIRO_BOARD]),
    _agent("design-system-agent", "Design System Agent", "Accessibility Lead", Category.DESIGN,
           "Maintains the design system and ensures accessibility (A11y).",
           "Ensure brand consistency and WCAG compliance.", tools=[AUDIT_DESIGN_TOKENS]),
    # Delivery & execution
    _agent("delivery-mgr-agent", "Delivery Manager", "Execution Lead", Category.DELIVERY,
           "Tracks project progress and removes delivery bottlenecks.",
           "Monitor delivery timelines and manage stakeholder expectations."),
    _agent("scrum-agent", "Scrum Master", "Jira Monitor", Category.DELIVERY,
           "Monitors Jira boards, cycle time, and team velocity.",
           "Facilitate agile ceremonies and monitor team health metrics.", tools=[GET_SPRINT_STATUS]),
    _agent("release-agent", "Release Manager", "Deployment Coordinator", Category.DELIVERY,
           "Coordinates release windows and environment readiness.",
           "Plan and coordinate production deployments.",
           tools=[OPEN_PULL_REQUEST, SEND_SLACK_MESSAGE]),
    _agent("dependency-agent", "Dependency Agent", "Risk Coordinator", Category.DELIVERY,
           "Tracks cross-team dependencies and delivery risks.",
           "Coordinate across teams to resolve blocking dependencies."),
    # Engineering
    _agent("code-agent", "Code Agent", "Lead Developer", Category.ENGINEERING,
           "Autonomous code generation and Pull Request management.",
           "Write high-quality, documented, and tested code."),
    _agent("arch-agent", "Architecture Agent", "Tech Standards Lead", Category.ENGINEERING,
           "Ensures adherence to tech standards and architectural patterns.",
           "Enforce architectural patterns and technical excellence."),
    _agent("security-agent", "Security Agent", "SecOps Lead", Category.ENGINEERING,
           "Manages secrets, vulnerability scans, and security posture.",
           "Secure the application and manage environment secrets."),
    # Quality & SRE
    _agent("test-agent", "Testing Agent", "QA Automation Lead", Category.QUALITY,
           "Generates and executes automated test suites.",
           "Create comprehensive test plans and automation scripts.", tools=[RUN_E2E_SUITE]),
    _agent("dod-agent", "Quality Gate Agent", "DoD Auditor", Category.QUALITY,
           "Audits features against the Definition of Done (DoD).",
           "Ensure every PR meets the quality and documentation gates."),
    _agent("sre-agent", "SRE Agent", "Observability Lead", Category.QUALITY,
           "Monitors system health, SLIs, and SLOs.",
           "Maximize system reliability and manage monitoring tools.",
           tools=[GET_SERVICE_HEALTH, LIST_ACTIVE_INCIDENTS]),
    _agent("incident-agent", "Incident Agent", "Post-Mortem Lead", Category.QUALITY,
           "Manages incident response and post-mortem analysis.",
           "Coordinate incident resolution and lead root-cause analysis.",
           tools=[LIST_ACTIVE_INCIDENTS, SEND_SLACK_MESSAGE]),
    # Data & analytics
    _agent("analytics-agent", "Analytics Agent", "Event Architect", Category.ANALYTICS,
           "Manages event tracking and data instrumentation.",
           "Design and audit data tracking and telemetry."),
    _agent("experiment-agent", "A/B Testing Agent", "Experimentation Lead", Category.ANALYTICS,
           "Runs experimentation and A/B testing analysis.",
           "Analyze experiment results and suggest optimizations."),
    _agent("data-quality-agent", "Data Quality Agent", "Anomaly Lead", Category.ANALYTICS,
           "Detects data anomalies and ensures pipeline integrity.",
           "Monitor data pipelines and flag quality issues.", tools=[SCAN_TABLE_INTEGRITY]),
    # Marketing & growth
    _agent("marketing-agent", "Marketing Agent", "Growth Strategist", Category.MARKETING,
           "Handles broader marketing strategy and campaign planning.",
           "Drive user acquisition and campaign performance. "
           "You can now post video content directly to Instagram using provided tools.",
           tools=[POST_INSTAGRAM_VIDEO]),
    _agent("seo-agent", "Growth & SEO", "SEO Architect", Category.MARKETING,
           "Handles digital presence, content, and SEO performance auditing.",
           "Optimize for organic growth. Monitor SEO performance.",
           tools=[GET_SEO_REPORT, ANALYZE_KEYWORDS]),
    _agent("lifecycle-agent", "Lifecycle Agent", "CRM Automation Lead", Category.MARKETING,
           "Manages email and CRM automation flows.",
           "Design user lifecycle and retention automation."),
    _agent("content-agent", "Content Agent", "Community Lead", Category.MARKETING,
           "Generates content and manages community engagement.",
           "Write engaging copy and manage social interactions.",
           tools=[PUBLISH_LINKEDIN_POST, PUBLISH_FACEBOOK_POST]),
    # Customer ops
    _agent("support-agent", "Support Agent", "Customer Success", Category.CUSTOMER,
           "Provides customer support and triage.",
           "Help users solve problems and improve satisfaction."),
    _agent("knowledge-agent", "Knowledge Agent", "Help Content Lead", Category.CUSTOMER,
           "Maintains the help center and documentation.",
           "Keep technical and user documentation up to date."),
    _agent("escalation-agent", "Escalation Agent", "Triage Lead", Category.CUSTOMER,
           "Handles critical customer escalations and triage.",
           "Prioritize and resolve high-severity user issues."),
    # Finance & legal
    _agent("finance-agent", "Finance Agent", "Cost Lead", Category.FINANCE,
           "Handles cost management and financial reporting.",
           "Optimize spend and manage budgets.", tools=[GET_AWS_SPEND, GET_REVENUE_METRICS]),
    _agent("legal-agent", "Legal Agent", "Policy Lead", Category.FINANCE,
           "Manages legal compliance and policy reviews.",
           "Review contracts and ensure regulatory compliance."),
    _agent("privacy-agent", "Data Protection Agent", "Compliance Lead", Category.FINANCE,
           "Ensures data protection and GDPR compliance.",
           "Maintain data privacy and compliance standards."),
    # Platform ops
    _agent("infra-agent", "Infrastructure Agent", "Cost Optimizer", Category.PLATFORM,
           "Optimizes cloud infrastructure and cloud spend.",
           "Manage cloud resources and optimize infrastructure.",
           tools=[GET_AWS_SPEND, LIST_S3_BUCKETS]),
    _agent("vendor-agent", "Vendor Agent", "Integration Lead", Category.PLATFORM,
           "Manages third-party vendor integrations.",
           "Manage vendor relationships and API integrations."),
    # Accountability
    _agent("human-owner", "Human Owner", "Final Accountability", Category.ACCOUNTABILITY,
           "Final sign-off and strategic accountability (Non-automatable).",
           "The ultimate authority. Review all autonomous outputs."),
)


class AgentRegistry:
    """Read-only lookup over the agent roster."""

    def __init__(self, agents: Iterable[Agent] = AGENTS) -> None:
        self._agents: Dict[str, Agent] = {}
        for agent in agents:
            if agent.id in self._agents:
                raise ValueError(f"Duplicate agent id: {agent.id}")
            self._agents[agent.id] = agent

    def find_by_id(self, agent_id: str) -> Optional[Agent]:
        return self._agents.get(agent_id)

    def all(self) -> List[Agent]:
        return list(self._agents.values())

    def find_by_name(self, fragment: str) -> Optional[Agent]:
        """Return the first agent whose name contains ``fragment`` (case-insensitive)."""
        needle = fragment.lower().strip()
        if not needle:
            return None
        return next((agent for agent in self._agents.values() if needle in agent.name.lower()), None)

    def search(self, category: Optional[Category] = None, query: Optional[str] = None) -> List[Agent]:
        """Filter agents by category and a case-insensitive text query."""
        needle = (query or "").lower()
        return [
            agent
            for agent in self._agents.values()
            if (category is None or agent.category == category)
            and (
                not needle
                or needle in agent.name.lower()
                or needle in agent.role.lower()
                or needle in agent.description.lower()
            )
        ]

    def default(self) -> Agent:
        """Fallback conductor: the supervisor if present, else the first agent."""
        supervisor = self._agents.get(SUPERVISOR_AGENT_ID)
        if supervisor is not None:
            return supervisor
        if not self._agents:
            raise LookupError("Agent registry is empty")
        return next(iter(self._agents.values()))
