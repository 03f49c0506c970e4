"""
Claude daily briefing: prompt building, generation, and Telegram formatting.
"""

import json
import re
from typing import List, Optional, Sequence

from pydantic import ValidationError

from fitlink_agent.config import CLAUDE_MODEL, logger
from fitlink_agent.models import ActivitySample, Briefing, HealthSummary, TodaysConditions
from fitlink_agent.prompts import briefing_system_prompt

SECTION_RULE = "═" * 79
MAX_RECENT_ACTIVITIES = 3
MAX_RECENT_BRIEFS = 3


class BriefingFormatError(ValueError):
    """Raised when the model's reply holds no usable briefing JSON."""


def _section(title: str) -> str:
    return f"\n{SECTION_RULE}\n{title}\n{SECTION_RULE}\n\n"


def _signed(value: float, digits: int = 1) -> str:
    return f"{value:+.{digits}f}"


def _describe_activity(activity: ActivitySample) -> str:
    minutes = round(activity.duration_seconds / 60)
    line = f"- {activity.start_time.strftime('%Y-%m-%d')}: {activity.activity_type}"
    if activity.name:
        line += f" \"{activity.name}\""
    if activity.distance_meters:
        line += f" {activity.distance_meters / 1000:.1f}km"
    line += f" ({minutes}min"
    if activity.tss_estimated is not None:
        line += f", TSS {activity.tss_estimated:.0f}"
    return line + ")"


def _describe_weather(weather: TodaysConditions) -> str:
    lines = []
    if weather.temp_min_c is not None and weather.temp_max_c is not None:
        lines.append(f"- Temp: {weather.temp_min_c:.0f} to {weather.temp_max_c:.0f} °C")
    lines.append(f"- Conditions: {weather.weather_description}")
    if weather.wind_kph:
        lines.append(f"- Wind: {weather.wind_kph:.0f} kph")
    if weather.precipitation_mm:
        lines.append(f"- Rain: {weather.precipitation_mm:.1f} mm")
    lines.append(f"- Exercise conditions: {weather.exercise_conditions}")
    return "\n".join(lines) + "\n"


def build_briefing_prompt(
    summary: HealthSummary,
    user: dict,
    recent_activities: Sequence[ActivitySample] = (),
    weather: Optional[TodaysConditions] = None,
    recent_briefs: Sequence[dict] = (),
) -> str:
    """
    Render a HealthSummary as labeled text sections for the coach model.

    The WEATHER section only appears when a forecast is available. Recent
    briefs (newest first, as logged by save_brief) are included so the coach
    can avoid repeating itself.
    """
    profile = summary.user_profile
    recent = summary.recent
    weekly = summary.weekly
    monthly = summary.monthly
    flags = summary.predictive_flags

    prompt = f"Write today's briefing for {user.get('first_name') or 'the athlete'}.\n"
    prompt += (
        f"Goal: {profile.training_goal.replace('_', ' ')}, "
        f"experience: {profile.experience_level}, age {profile.age}, sex {profile.sex}\n"
    )

    prompt += _section("LAST FEW NIGHTS")
    if recent.sleep_trend == "no_data":
        prompt += "No recent sleep data.\n"
    else:
        prompt += f"- Sleep trend: {recent.sleep_trend}\n"
        prompt += f"- HRV: avg {recent.hrv_pattern.avg:.1f} ms, trend {_signed(recent.hrv_pattern.trend)}%\n"
        for alert in recent.hrv_pattern.alerts:
            prompt += f"- Alert: {alert}\n"
        prompt += f"- Resting HR change vs previous night: {_signed(recent.recovery_markers.rhr_change)} bpm\n"
        prompt += f"- Temperature deviation: {_signed(recent.recovery_markers.temp_deviation, 2)} °C\n"
        prompt += f"- Energy pattern: {recent.energy_pattern}\n"

    prompt += _section("TRAINING LOAD")
    load = recent.training_load
    prompt += f"- Last 7 sessions TSS: {load.current:.0f} (fatigue score {load.fatigue_score})\n"
    prompt += f"- Progression: {weekly.training_progression}\n"
    prompt += (
        f"- Quality sessions this week: {weekly.performance_markers.quality_sessions}, "
        f"recovery days: {weekly.performance_markers.recovery_days}\n"
    )
    if recent_activities:
        prompt += "\nRecent activities:\n"
        for activity in list(recent_activities)[:MAX_RECENT_ACTIVITIES]:
            prompt += _describe_activity(activity) + "\n"
    else:
        prompt += "No recent activities recorded.\n"

    prompt += _section("THIS WEEK")
    prompt += f"- Sleep consistency: {weekly.sleep_consistency:.0f}/100\n"
    prompt += (
        f"- Elevated RHR days: {weekly.stress_indicators.elevated_rhr_days}, "
        f"poor HRV days: {weekly.stress_indicators.poor_hrv_days}\n"
    )
    for signal in weekly.adaptation_signals:
        prompt += f"- {signal}\n"

    prompt += _section("LAST 30 DAYS")
    prompt += f"- Seasonal: {', '.join(monthly.seasonal_trends) or 'none'}\n"
    prompt += f"- Lifestyle: {', '.join(monthly.lifestyle_patterns) or 'none'}\n"
    prompt += (
        f"- Baseline shifts: HRV slope {monthly.baseline_shifts.hrv_trend:.2f}/day, "
        f"RHR slope {monthly.baseline_shifts.rhr_trend:.2f}/day\n"
    )
    prompt += (
        f"- Correlations: sleep/training {monthly.health_correlations.sleep_training}, "
        f"HRV/RHR {monthly.health_correlations.stress_recovery}\n"
    )

    prompt += _section("RISK FLAGS")
    prompt += f"- Illness risk: {flags.illness_risk}\n"
    prompt += f"- Overtraining risk: {flags.overtraining_risk}\n"
    prompt += f"- Peak performance window: {flags.peak_performance_window or 'not expected soon'}\n"

    if weather is not None:
        prompt += _section(f"WEATHER TODAY ({weather.city})")
        prompt += _describe_weather(weather)

    prompt += _section("RECENT BRIEFINGS")
    for brief in list(recent_briefs)[:MAX_RECENT_BRIEFS]:
        prompt += f"### {brief['date']}\n{brief['content']}\n\n"
    if not recent_briefs:
        prompt += "No previous briefings.\n"

    return prompt


def parse_briefing(text: str) -> Briefing:
    """Pull the JSON object out of the model's reply (it may wrap it in prose)."""
    match = re.search(r"\{[\s\S]*\}", text)
    if not match:
        raise BriefingFormatError("No JSON found in briefing response")
    try:
        return Briefing.model_validate(json.loads(match.group(0)))
    except (json.JSONDecodeError, ValidationError) as e:
        raise BriefingFormatError(f"Invalid briefing format: {e}") from e


def generate_briefing_with_claude(
    api_key: str,
    summary: HealthSummary,
    user: dict,
    recent_activities: Sequence[ActivitySample] = (),
    weather: Optional[TodaysConditions] = None,
    recent_briefs: Sequence[dict] = (),
) -> Briefing:
    """Ask Claude for today's briefing and parse it into a Briefing."""
    import anthropic

    client = anthropic.Anthropic(api_key=api_key)

    response = client.messages.create(
        model=CLAUDE_MODEL,
        max_tokens=1000,
        system=briefing_system_prompt(),
        messages=[
            {"role": "user", "content": build_briefing_prompt(summary, user, recent_activities, weather, recent_briefs)}
        ]
    )

    for block in response.content:
        if block.type == "text":
            try:
                return parse_briefing(block.text)
            except BriefingFormatError:
                logger.error(f"Unparsable briefing response: {block.text[:500]}")
                raise
    raise BriefingFormatError("Briefing response had no text content")


def time_based_greeting(hour: int) -> str:
    if hour < 5:
        return "Good night"
    if hour < 12:
        return "Good morning"
    if hour < 17:
        return "Good afternoon"
    if hour < 22:
        return "Good evening"
    return "Good night"


def format_briefing_message(first_name: Optional[str], briefing: Briefing, local_hour: int) -> str:
    """Render a Briefing as a Telegram Markdown message."""
    parts: List[str] = [
        f"{time_based_greeting(local_hour)} {first_name or 'there'}! 👋",
        f"*{briefing.headline}*",
    ]

    if briefing.sleep_insight:
        parts.append(f"💤 *Sleep:* {briefing.sleep_insight}")
    if briefing.readiness_note:
        parts.append(f"⚡ *Readiness:* {briefing.readiness_note}")
    parts.append(f"🎯 *Plan:* {briefing.training_plan}")
    if briefing.weather_note:
        parts.append(f"🌤️ *Weather:* {briefing.weather_note}")
    if briefing.micro_actions:
        actions = "\n".join(f"• {action}" for action in briefing.micro_actions)
        parts.append(f"✅ *Actions:*\n{actions}")
    if briefing.caution:
        parts.append(f"⚠️ *Note:* {briefing.caution}")

    parts.append("_Stay strong! 💪_")
    return "\n\n".join(parts)
