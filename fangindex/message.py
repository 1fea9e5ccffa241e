"""Plain-text report formatter."""

from datetime import datetime
from typing import Dict, List, Optional

from .fetch import WeatherSnapshot
from .insights import Insight
from .ranking import RankedSpot, Recommendation

MEDALS = ["🥇", "🥈", "🥉"]


def format_weather_line(weather: Optional[WeatherSnapshot]) -> str:
    """Format the current weather line."""
    if weather is None:
        return "Weather: N/A"

    parts = [
        f"{weather.temp:+.0f}°C",
        f"{weather.pressure} hPa",
        f"wind {weather.wind_speed:.0f} m/s",
        f"clouds {weather.clouds}%",
    ]
    if weather.description:
        parts.append(weather.description)
    return "Weather: " + ", ".join(parts)


def format_insight_line(insight: Insight) -> str:
    line = f"{insight.icon} {insight.title} {insight.message}"
    if insight.action is not None:
        line += f" [{insight.action.label}]"
    return line


def format_species(species: List) -> str:
    return ", ".join(s.value for s in species) if species else "—"


def format_spot_block(spot: RankedSpot, rank: int) -> str:
    """Format a single ranked spot block."""
    w = spot.water
    medal = MEDALS[rank - 1] if rank <= len(MEDALS) else f"{rank}."
    title = f"{medal} **{w.name}** — {spot.distance_km:.1f} km"
    if w.is_assumed:
        title += " (unverified)"

    lines = [
        title,
        f"Fangindex: {spot.fangindex}/100 ({spot.fangindex_result.reasoning})",
        f"Type: {w.raw_type or w.water_type.value}"
        + (f" | Region: {w.region}" if w.region else ""),
        f"Fish: {format_species(w.fish_species)}",
    ]
    if w.permit_price is not None and w.permit_price > 0:
        lines.append(f"💶 Day permit: €{w.permit_price:.2f}")
    lines.append(spot.fangindex_result.recommendation)

    return "\n".join(lines)


def format_recommendation_line(rec: Recommendation) -> str:
    fish = format_species(rec.best_fish)
    return f"{rec.icon} {rec.label}: {rec.spot.name} — {rec.reason} ({fish}; {rec.timing})"


def format_report(
    now: datetime,
    headline: Dict[str, str],
    weather: Optional[WeatherSnapshot],
    insights: List[Insight],
    spots: List[RankedSpot],
    recommendations: Optional[List[Recommendation]] = None,
    n_skipped: int = 0,
) -> str:
    """Format the complete report.

    Args:
        now: Time of the evaluation.
        headline: Dict with "headline" and "subheadline".
        weather: Current weather, None if unavailable.
        insights: Prioritized insights (already capped).
        spots: Ranked spots, best first.
        recommendations: Optional categorized picks.
        n_skipped: Number of water records dropped as malformed.

    Returns:
        Formatted report string.
    """
    lines = [
        f"🎣 **{headline['headline']}** ({now.strftime('%Y-%m-%d %H:%M')})",
        headline["subheadline"],
        "",
        format_weather_line(weather),
    ]

    if insights:
        lines.append("")
        for insight in insights:
            lines.append(format_insight_line(insight))

    lines.append("")
    if not spots:
        lines.append("❌ No waters found nearby.")
    else:
        lines.append("📍 **Top spots:**")
        lines.append("")
        for i, spot in enumerate(spots):
            lines.append(format_spot_block(spot, i + 1))
            lines.append("")
            lines.append("---")
            lines.append("")

        # Remove trailing separator
        if lines[-1] == "":
            lines.pop()
        if lines[-1] == "---":
            lines.pop()
        if lines[-1] == "":
            lines.pop()

    if recommendations:
        lines.append("")
        lines.append("💡 **Recommendations:**")
        for rec in recommendations:
            lines.append(format_recommendation_line(rec))

    if n_skipped:
        lines.append("")
        lines.append(f"⚠️ {n_skipped} water record(s) skipped (invalid data)")

    return "\n".join(lines)
