"""Static market headlines for the news panel."""

from datetime import datetime, timezone

# (title, summary, category)
HEADLINES = [
    ("Fed weighs timing of rate cuts", "Officials say more evidence of cooling inflation is needed", "Economy"),
    ("Tech stocks rally on AI optimism", "Investors bid up shares on artificial intelligence growth outlook", "Markets"),
    ("Oil rises on supply concerns", "Geopolitical tension raises fears of global supply disruption", "Commodities"),
    ("Asian markets mixed after US decline", "Major Asian indices diverge following weakness on Wall Street", "Global"),
    ("Samsung unveils new AI chip", "Investment plan aims to lead the next-generation AI semiconductor market", "Companies"),
    ("China property market shows recovery", "Government support lifts transaction volumes in major cities", "Asia"),
    ("SK Hynix sees surge in AI memory demand", "Strong HBM sales for AI servers point to better earnings", "Companies"),
    ("Tesla loses share in China", "Competition from BYD and local makers erodes market share", "Autos"),
    ("Bitcoin breaks $50,000", "Institutional inflows continue after spot ETF launch", "Crypto"),
    ("LG Energy Solution expands US battery plant", "Georgia capacity grows to capture IRA tax credits", "Companies"),
    ("Bank of Japan considers ending negative rates", "Persistent inflation raises odds of first policy shift in decades", "Economy"),
    ("EU gives final approval to AI act", "World's first comprehensive AI regulatory framework set to take effect", "Policy"),
    ("Hyundai reveals EV platform", "Dedicated platform improves range and charging speed", "Autos"),
    ("Apple expands production in India", "Plan raises India's share of output to reduce reliance on China", "Companies"),
    ("Crude climbs on Middle East tension", "Prolonged conflict adds to supply uncertainty", "Commodities"),
    ("Meta teases new VR headset", "New Quest model in the second half to strengthen XR lead", "Technology"),
    ("Bank of Korea holds base rate", "Slowdown concerns outweigh sticky inflation", "Economy"),
    ("TSMC delays US plant opening", "Staffing shortages push back Arizona production schedule", "Companies"),
]


def latest_news(now: datetime | None = None) -> list[dict]:
    """All headlines stamped with the current UTC time."""
    stamp = (now or datetime.now(timezone.utc)).isoformat()
    return [
        {"id": i, "title": title, "summary": summary, "category": category, "datetime": stamp}
        for i, (title, summary, category) in enumerate(HEADLINES, start=1)
    ]
