"""MCP server exposing recent agent sessions as tools."""

from mcp.server.fastmcp import FastMCP

from contextresume import config
from contextresume.sessions import build_sources, gather_sessions, recent_sessions

mcp = FastMCP("context-resume")


@mcp.tool()
async def list_sessions(
    project_path: str,
    source: str | None = None,
    limit: int = config.DEFAULT_LIMIT,
) -> dict[str, list[dict]]:
    """List recent AI coding sessions for a project, grouped by agent.

    Use this to find what Claude Code, Codex, Cursor or Gemini did previously in
    a project. Each entry has the transcript path, which can be read for detail.

    Args:
        project_path: Absolute path to the project
        source: Optional - one of "claude", "codex", "cursor", "gemini"
        limit: Maximum sessions per agent (default 10)
    """
    if source is not None and source not in config.SOURCES:
        raise ValueError(f"Unknown source: {source}. Expected one of {', '.join(config.SOURCES)}")
    names = [source] if source else None
    grouped = await gather_sessions(
        project_path, limit, build_sources(home=config.HOME, names=names)
    )
    return {
        name: [s.model_dump(by_alias=True) for s in summaries]
        for name, summaries in grouped.items()
    }


@mcp.tool()
async def get_recent_sessions(
    project_path: str,
    limit: int = config.DEFAULT_LIMIT,
) -> list[dict]:
    """Most recent sessions for a project across all agents, newest first.

    Args:
        project_path: Absolute path to the project
        limit: Maximum sessions per agent (default 10)
    """
    summaries = await recent_sessions(project_path, limit, build_sources(home=config.HOME))
    return [s.model_dump(by_alias=True) for s in summaries]
