"""
Platform profile: central place to declare the brand, the trade catalogue,
urgency indicators and the pricing guideline table. Prompt builders read from
here instead of hardcoding. Swap this out per market.
"""

# Single confidence threshold communicated to the oracle for follow-up questions.
FOLLOW_UP_CONFIDENCE = 0.6

PLATFORM_PROFILE = {
    "brand": "TradeMatch",
    "trades": [
        {"key": "electrician", "label": "Electrician", "desc": "Wiring, outlets, panels, lighting, electrical safety"},
        {"key": "plumber", "label": "Plumber", "desc": "Pipes, leaks, drains, water heaters, fixtures"},
        {"key": "hvac", "label": "HVAC", "desc": "Heating, cooling, ventilation, air conditioning"},
        {"key": "carpenter", "label": "Carpenter", "desc": "Wood work, doors, windows, cabinets, framing"},
        {"key": "mechanic", "label": "Mechanic", "desc": "Vehicle repair, engine work, automotive systems"},
        {"key": "handyman", "label": "Handyman", "desc": "General repairs, assembly, minor fixes"},
        {"key": "appliance_repair", "label": "Appliance Repair", "desc": "Washers, dryers, refrigerators, ovens"},
        {"key": "locksmith", "label": "Locksmith", "desc": "Locks, keys, security systems"},
        {"key": "painter", "label": "Painter", "desc": "Interior/exterior painting, drywall"},
        {"key": "roofer", "label": "Roofer", "desc": "Roof repair, gutters, weatherproofing"},
    ],
    "urgency_levels": {
        "emergency": "Safety hazard, flooding, no power, etc.",
        "soon": "Needs attention within 24-48 hours",
        "flexible": "Can wait days/weeks",
    },
    "urgency_indicators": {
        "emergency": ["sparking", "flooding", "gas leak", "no heat", "emergency", "urgent", "asap"],
        "soon": ["today", "tomorrow", "soon", "quickly", "not working"],
        "flexible": ["when convenient", "sometime", "planning", "upgrade"],
    },
    # Advisory bands sent to the oracle; the core never applies them itself.
    "pricing_guidelines": [
        {"key": "emergency", "label": "Emergency jobs (flooding, electrical hazards)", "band": "25-50% premium"},
        {"key": "urgent", "label": "Same-day/urgent requests", "band": "15-25% premium"},
        {"key": "high_rating", "label": "Highly rated workers (4.5+)", "band": "10-20% premium"},
        {"key": "experience", "label": "Extensive experience (10+ years)", "band": "10-15% premium"},
        {"key": "certification", "label": "Specialized certifications", "band": "5-15% premium"},
        {"key": "travel", "label": "Travel >10 miles", "band": "Add $20-40 travel fee"},
        {"key": "demand", "label": "Peak demand times", "band": "10-20% premium"},
        {"key": "complexity", "label": "Complex/risky jobs", "band": "15-30% premium"},
    ],
}


def trade_catalogue_text() -> str:
    return "\n".join(f"- {t['label']}: {t['desc']}" for t in PLATFORM_PROFILE.get("trades", []))


def urgency_indicators_text() -> str:
    rows = PLATFORM_PROFILE.get("urgency_indicators", {})
    return "\n".join(
        f"- {level.capitalize()}: " + ", ".join(f'"{w}"' for w in words) for level, words in rows.items()
    )


def pricing_guidelines_text() -> str:
    return "\n".join(f"- {g['label']}: {g['band']}" for g in PLATFORM_PROFILE.get("pricing_guidelines", []))
