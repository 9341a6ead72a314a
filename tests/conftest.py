"""Pytest configuration and fixtures."""

import os
from datetime import UTC, datetime

import pytest

# Set test environment before any engine code runs; never reach a real model
os.environ["ENV"] = "test"
os.environ.pop("OPENROUTER_API_KEY", None)
os.environ.pop("OPENAI_API_KEY", None)


RUNNING_SHOES_HTML = """
<html>
<head>
    <title>Best Running Shoes | Stride Co</title>
    <meta name="description" content="Our guide to the best running shoes for every runner, tested on road and trail.">
</head>
<body>
    <nav><a href="/">Home</a><a href="/shop">Shop</a></nav>
    <main>
        <h1>Best Running Shoes</h1>
        <p>We tested dozens of pairs over three months. The best running shoes balance cushioning,
        weight and fit. This guide explains how we chose them and who each pair suits.</p>
        <h2>FAQ</h2>
        <h3>What are the best running shoes?</h3>
        <p>The best running shoes are the ones that fit your foot and your training. For most runners
        that means a neutral trainer with moderate cushioning.</p>
    </main>
    <footer>Copyright 2024 Stride Co</footer>
</body>
</html>
"""

FAQ_PAGE_SCHEMA = """
<script type="application/ld+json">
{
    "@context": "https://schema.org",
    "@type": "FAQPage",
    "mainEntity": [
        {
            "@type": "Question",
            "name": "What are the best running shoes?",
            "acceptedAnswer": {"@type": "Answer", "text": "The ones that fit your foot and your training."}
        },
        {
            "@type": "Question",
            "name": "How often should I replace running shoes?",
            "acceptedAnswer": {"@type": "Answer", "text": "Every 500 to 800 kilometres."}
        }
    ]
}
</script>
"""

ARTICLE_HTML = """
<html>
<head><title>How Solar Panels Work - Bright Energy</title></head>
<body>
<article>
    <h1>How Solar Panels Work</h1>
    <p>Solar panels turn sunlight into electricity. Each panel holds many small cells made of silicon.
    When light hits a cell, it frees electrons and creates a current.</p>
    <h2>What is a photovoltaic cell?</h2>
    <p>A photovoltaic cell is the basic unit of a solar panel. It is a thin wafer of silicon that
    produces a small voltage in sunlight.</p>
    <h2>Key components</h2>
    <ul>
        <li>Silicon cells that capture light</li>
        <li>An inverter that converts direct current to alternating current</li>
        <li>A mounting system that holds the panels at the right angle</li>
    </ul>
    <h3>Efficiency by panel type</h3>
    <table>
        <tr><th>Type</th><th>Efficiency</th></tr>
        <tr><td>Monocrystalline</td><td>20%</td></tr>
        <tr><td>Polycrystalline</td><td>16%</td></tr>
    </table>
    <img src="/panel.jpg" alt="Rooftop solar panels">
    <img src="/inverter.jpg">
    <p>In summary, solar panels are a simple and reliable way to produce clean power at home.</p>
</article>
</body>
</html>
"""


def fixed_clock() -> datetime:
    return datetime(2024, 1, 15, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def running_shoes_html() -> str:
    return RUNNING_SHOES_HTML


@pytest.fixture
def faq_page_schema() -> str:
    return FAQ_PAGE_SCHEMA


@pytest.fixture
def article_html() -> str:
    return ARTICLE_HTML


@pytest.fixture
def settings():
    """Settings with the qualitative stage disabled."""
    from aeoscore.config import Settings

    return Settings(env="test", qualitative_enabled=False, openrouter_api_key=None, openai_api_key=None)


@pytest.fixture
def clock():
    return fixed_clock
