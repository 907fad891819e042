"""
LogSight - CS:GO Match Log Analyzer

Turns a game-server console log of one competitive match into a match
document: team scores, per-round detail (kill feed, flashes, chat) and
per-player statistics (ADR, HS%, opening duels, clutches, flash
effectiveness, multi-kill rounds).

Usage:
    from logsight import parse_log, analyze_match

    parsed = parse_log("match.log")
    match = analyze_match(parsed)

    for player in match["players"]:
        print(f"{player['name']}: {player['kills']} kills, {player['adr']} ADR")
"""

__version__ = "0.1.0"
__author__ = "LogSight Contributors"


def __getattr__(name):
    """Lazy import so the CLI and API start fast."""
    # Parser
    if name == "LogParser":
        from logsight.parser import LogParser
        return LogParser
    elif name == "ParsedLog":
        from logsight.parser import ParsedLog
        return ParsedLog
    elif name == "parse_log":
        from logsight.parser import parse_log
        return parse_log
    elif name == "LogReadError":
        from logsight.parser import LogReadError
        return LogReadError
    # Analysis
    elif name == "MatchAnalyzer":
        from logsight.analytics import MatchAnalyzer
        return MatchAnalyzer
    elif name == "analyze_match":
        from logsight.analytics import analyze_match
        return analyze_match
    elif name == "analyze_log":
        from logsight.analytics import analyze_log
        return analyze_log
    elif name == "export_match":
        from logsight.export import export_match
        return export_match
    raise AttributeError(f"module 'logsight' has no attribute '{name}'")


__all__ = [
    # Version
    "__version__",
    # Parser
    "LogParser",
    "ParsedLog",
    "parse_log",
    "LogReadError",
    # Analysis
    "MatchAnalyzer",
    "analyze_match",
    "analyze_log",
    # Export
    "export_match",
]
