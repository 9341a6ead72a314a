"""Recommendation templates for each trigger.

Score triggers fire when a sub-score falls below its threshold. Detail
triggers fire on specific findings (missing H1, images without alt text,
FAQ content without FAQPage markup, ...) and carry the sub-score they feed.
"""

from dataclasses import dataclass, replace
from enum import StrEnum

from aeoscore.extraction.classifier import Industry
from aeoscore.scoring.weights import (
    AI_ANALYSIS,
    CONTENT_DEPTH,
    HEADINGS_STRUCTURE,
    KEYWORD_OPTIMIZATION,
    QUESTION_ANSWER_MATCH,
    READABILITY,
    SCHEMA,
)


class Trigger(StrEnum):
    """Condition that produces a recommendation."""

    # Sub-score below threshold
    LOW_READABILITY = "low_readability"
    LOW_SCHEMA = "low_schema"
    LOW_QUESTION_ANSWER = "low_question_answer"
    LOW_HEADINGS = "low_headings"
    LOW_CONTENT_DEPTH = "low_content_depth"
    LOW_KEYWORDS = "low_keywords"
    LOW_AI_ANALYSIS = "low_ai_analysis"

    # Specific findings
    MISSING_H1 = "missing_h1"
    HEADING_SKIPS = "heading_skips"
    MISSING_ALT_TEXT = "missing_alt_text"
    THIN_CONTENT = "thin_content"
    SCHEMA_PARSE_ERROR = "schema_parse_error"
    FAQ_WITHOUT_SCHEMA = "faq_without_schema"
    WEAK_META_DESCRIPTION = "weak_meta_description"


class Category(StrEnum):
    TECHNICAL = "technical"
    CONTENT = "content"
    STRUCTURE = "structure"
    AI = "ai"


class Effort(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class RecommendationTemplate:
    """Template for generating a recommendation."""

    trigger: Trigger
    target: str | None  # Sub-score key the recommendation improves; None when no sub-score measures it
    title: str
    description: str
    rationale: str
    example: str
    expected_impact: str
    category: Category
    effort: Effort
    action: str  # Short imperative used for quick wins
    max_gain: int  # Sub-score points the fix can recover
    min_impact: float = 0.0  # Priority floor for detail triggers

    def to_dict(self) -> dict:
        return {
            "trigger": self.trigger.value,
            "target": self.target,
            "title": self.title,
            "description": self.description,
            "rationale": self.rationale,
            "example": self.example,
            "expectedImpact": self.expected_impact,
            "category": self.category.value,
            "effort": self.effort.value,
            "action": self.action,
            "maxGain": self.max_gain,
        }


# Templates in evaluation order; ties in priority and impact keep this order
RECOMMENDATION_TEMPLATES: dict[Trigger, RecommendationTemplate] = {
    Trigger.MISSING_H1: RecommendationTemplate(
        trigger=Trigger.MISSING_H1,
        target=HEADINGS_STRUCTURE,
        title="Add a single descriptive H1 heading",
        description="Give the page exactly one H1 that states the main topic in plain words.",
        rationale="Answer engines use the H1 as the primary signal of what a page is about.",
        example="<h1>How to Choose a Running Shoe for Flat Feet</h1>",
        expected_impact="Clearer topic identification for AI summaries and citations",
        category=Category.STRUCTURE,
        effort=Effort.LOW,
        action="Add an H1 that names the page topic",
        max_gain=25,
        min_impact=6.0,
    ),
    Trigger.SCHEMA_PARSE_ERROR: RecommendationTemplate(
        trigger=Trigger.SCHEMA_PARSE_ERROR,
        target=SCHEMA,
        title="Fix invalid structured data",
        description="One or more JSON-LD blocks could not be parsed. Validate and correct the markup.",
        rationale="Unparseable structured data is ignored entirely by crawlers and answer engines.",
        example='Check for trailing commas and unescaped quotes, e.g. {"@type": "Article", "headline": "..."}',
        expected_impact="Structured data becomes readable to search and AI systems",
        category=Category.TECHNICAL,
        effort=Effort.LOW,
        action="Repair the JSON-LD blocks that fail to parse",
        max_gain=20,
        min_impact=6.0,
    ),
    Trigger.LOW_SCHEMA: RecommendationTemplate(
        trigger=Trigger.LOW_SCHEMA,
        target=SCHEMA,
        title="Add complete Schema.org structured data",
        description="Describe the page with JSON-LD markup for its main entity and fill the required fields.",
        rationale="Structured data lets AI systems extract facts without guessing from prose.",
        example='<script type="application/ld+json">{"@context": "https://schema.org", "@type": "Article", '
        '"headline": "...", "author": {"@type": "Person", "name": "..."}, "datePublished": "2024-01-15"}</script>',
        expected_impact="Higher chance of being cited with accurate facts",
        category=Category.TECHNICAL,
        effort=Effort.MEDIUM,
        action="Add JSON-LD markup for the page's main entity",
        max_gain=40,
    ),
    Trigger.FAQ_WITHOUT_SCHEMA: RecommendationTemplate(
        trigger=Trigger.FAQ_WITHOUT_SCHEMA,
        target=SCHEMA,
        title="Mark up existing FAQs with FAQPage schema",
        description="The page already answers questions. Wrap those pairs in FAQPage structured data.",
        rationale="FAQPage markup exposes question and answer pairs directly to answer engines.",
        example='{"@type": "FAQPage", "mainEntity": [{"@type": "Question", "name": "...", '
        '"acceptedAnswer": {"@type": "Answer", "text": "..."}}]}',
        expected_impact="Questions on the page become eligible for direct answers",
        category=Category.TECHNICAL,
        effort=Effort.LOW,
        action="Wrap the existing FAQ content in FAQPage JSON-LD",
        max_gain=20,
        min_impact=3.0,
    ),
    Trigger.LOW_QUESTION_ANSWER: RecommendationTemplate(
        trigger=Trigger.LOW_QUESTION_ANSWER,
        target=QUESTION_ANSWER_MATCH,
        title="Answer common questions directly",
        description="Add question-style headings followed by concise answers that use your target terms.",
        rationale="Answer engines favor content that pairs a clear question with a direct answer.",
        example="<h2>How long does shipping take?</h2><p>Orders ship within 2 business days.</p>",
        expected_impact="More passages that can be quoted as direct answers",
        category=Category.CONTENT,
        effort=Effort.MEDIUM,
        action="Add a short FAQ section with direct answers",
        max_gain=40,
    ),
    Trigger.LOW_HEADINGS: RecommendationTemplate(
        trigger=Trigger.LOW_HEADINGS,
        target=HEADINGS_STRUCTURE,
        title="Improve the heading hierarchy",
        description="Organize the content with a clear H1, H2 and H3 outline that reflects its sections.",
        rationale="A consistent outline helps AI systems segment content into answerable sections.",
        example="H1: Topic / H2: What it is / H2: How it works / H3: Step 1",
        expected_impact="Sections are easier to extract and summarize",
        category=Category.STRUCTURE,
        effort=Effort.MEDIUM,
        action="Restructure headings into a clean H1-H2-H3 outline",
        max_gain=30,
    ),
    Trigger.HEADING_SKIPS: RecommendationTemplate(
        trigger=Trigger.HEADING_SKIPS,
        target=HEADINGS_STRUCTURE,
        title="Remove skipped heading levels",
        description="Headings jump levels (for example H1 straight to H3). Use each level in order.",
        rationale="Skipped levels break the document outline that parsers rely on.",
        example="Change <h1> followed by <h3> into <h1> followed by <h2>",
        expected_impact="A valid outline for section-level extraction",
        category=Category.STRUCTURE,
        effort=Effort.LOW,
        action="Fix headings that skip a level",
        max_gain=10,
        min_impact=2.5,
    ),
    Trigger.LOW_READABILITY: RecommendationTemplate(
        trigger=Trigger.LOW_READABILITY,
        target=READABILITY,
        title="Simplify sentences and word choice",
        description="Use shorter sentences and plainer language. Break long paragraphs into smaller ones.",
        rationale="Plain, well-paced prose is easier for models to quote accurately.",
        example="Replace 'utilize' with 'use' and split sentences longer than 25 words.",
        expected_impact="Passages are easier to understand and quote",
        category=Category.CONTENT,
        effort=Effort.MEDIUM,
        action="Shorten long sentences in the opening paragraphs",
        max_gain=30,
    ),
    Trigger.THIN_CONTENT: RecommendationTemplate(
        trigger=Trigger.THIN_CONTENT,
        target=CONTENT_DEPTH,
        title="Expand the content with more detail",
        description="The page has fewer than 500 words. Cover the topic more fully with examples and specifics.",
        rationale="Thin pages rarely contain enough information to be chosen as a source.",
        example="Add sections on use cases, comparisons and common mistakes.",
        expected_impact="More complete coverage of the questions users ask",
        category=Category.CONTENT,
        effort=Effort.HIGH,
        action="Expand the page with supporting sections",
        max_gain=40,
        min_impact=3.0,
    ),
    Trigger.LOW_CONTENT_DEPTH: RecommendationTemplate(
        trigger=Trigger.LOW_CONTENT_DEPTH,
        target=CONTENT_DEPTH,
        title="Add depth with lists, tables and sections",
        description="Break the topic into headed sections and summarize key facts in lists or tables.",
        rationale="Structured, detailed content gives answer engines more extractable facts.",
        example="Add a comparison table or a bulleted list of key specifications.",
        expected_impact="More self-contained facts available for extraction",
        category=Category.CONTENT,
        effort=Effort.MEDIUM,
        action="Summarize key facts in a bulleted list",
        max_gain=30,
    ),
    Trigger.LOW_KEYWORDS: RecommendationTemplate(
        trigger=Trigger.LOW_KEYWORDS,
        target=KEYWORD_OPTIMIZATION,
        title="Use your target keywords in key positions",
        description="Place the main keyword in the title, the H1, the first paragraph and a subheading.",
        rationale="Consistent topic terms help systems match the page to relevant queries.",
        example="Title: 'Flat Feet Running Shoes: A Buyer's Guide' with the same phrase in the H1.",
        expected_impact="Stronger relevance for the queries you target",
        category=Category.CONTENT,
        effort=Effort.LOW,
        action="Add the main keyword to the title and first paragraph",
        max_gain=30,
    ),
    Trigger.MISSING_ALT_TEXT: RecommendationTemplate(
        trigger=Trigger.MISSING_ALT_TEXT,
        target=None,
        title="Add descriptive alt text to images",
        description="Give every meaningful image a short alt attribute that describes what it shows.",
        rationale="Alt text is the only image content that text-based systems can read.",
        example='<img src="chart.png" alt="Monthly sales rising from 10k to 40k in 2024">',
        expected_impact="Better accessibility and image understanding",
        category=Category.TECHNICAL,
        effort=Effort.LOW,
        action="Write alt text for images that lack it",
        max_gain=10,
        min_impact=2.5,
    ),
    Trigger.WEAK_META_DESCRIPTION: RecommendationTemplate(
        trigger=Trigger.WEAK_META_DESCRIPTION,
        target=KEYWORD_OPTIMIZATION,
        title="Write a clear meta description",
        description="Summarize the page in one or two sentences of 50 to 160 characters.",
        rationale="The meta description is often used as the page summary by search and AI tools.",
        example='<meta name="description" content="A practical guide to choosing running shoes for flat feet.">',
        expected_impact="More accurate page summaries",
        category=Category.TECHNICAL,
        effort=Effort.LOW,
        action="Write a 50-160 character meta description",
        max_gain=10,
        min_impact=1.0,
    ),
    Trigger.LOW_AI_ANALYSIS: RecommendationTemplate(
        trigger=Trigger.LOW_AI_ANALYSIS,
        target=AI_ANALYSIS,
        title="Make key facts explicit and verifiable",
        description="State names, figures, dates and sources directly instead of implying them.",
        rationale="Models prefer content whose claims are specific and easy to verify.",
        example="Instead of 'we've helped many clients', write 'we've helped 250 clients since 2015'.",
        expected_impact="Higher confidence when models cite the page",
        category=Category.AI,
        effort=Effort.MEDIUM,
        action="Add concrete figures and sources to the main claims",
        max_gain=30,
    ),
}


# Industry-specific text replacing template fields
INDUSTRY_OVERRIDES: dict[tuple[Industry, Trigger], dict[str, str]] = {
    (Industry.ECOMMERCE, Trigger.LOW_SCHEMA): {
        "title": "Add complete Product schema",
        "description": "Mark up each product with Product JSON-LD including offers, price and availability.",
        "example": '{"@type": "Product", "name": "...", "offers": {"@type": "Offer", "price": "49.99", '
        '"priceCurrency": "USD", "availability": "https://schema.org/InStock"}}',
        "action": "Add Product JSON-LD with price and availability",
    },
    (Industry.ECOMMERCE, Trigger.LOW_QUESTION_ANSWER): {
        "description": "Answer buyer questions about sizing, shipping, returns and compatibility on the page.",
        "example": "<h2>What is your return policy?</h2><p>Returns are free within 30 days.</p>",
    },
    (Industry.SAAS, Trigger.LOW_QUESTION_ANSWER): {
        "description": "Answer evaluation questions about pricing, integrations, security and onboarding.",
        "example": "<h2>Does it integrate with Slack?</h2><p>Yes. Connect a workspace in two clicks.</p>",
    },
    (Industry.SAAS, Trigger.LOW_SCHEMA): {
        "title": "Add SoftwareApplication schema",
        "example": '{"@type": "SoftwareApplication", "name": "...", "applicationCategory": "BusinessApplication", '
        '"offers": {"@type": "Offer", "price": "0"}}',
    },
    (Industry.LOCAL_BUSINESS, Trigger.LOW_SCHEMA): {
        "title": "Add LocalBusiness schema",
        "description": "Publish your name, address, phone and opening hours as LocalBusiness JSON-LD.",
        "example": '{"@type": "LocalBusiness", "name": "...", "address": {...}, "telephone": "...", '
        '"openingHours": "Mo-Fr 09:00-17:00"}',
        "action": "Add LocalBusiness JSON-LD with address and hours",
    },
    (Industry.HEALTHCARE, Trigger.LOW_READABILITY): {
        "title": "Write in patient-friendly language",
        "description": "Explain medical terms in plain words and keep sentences short.",
        "example": "Replace 'hypertension' with 'high blood pressure (hypertension)'.",
    },
    (Industry.HEALTHCARE, Trigger.LOW_SCHEMA): {
        "title": "Add MedicalOrganization or Physician schema",
        "example": '{"@type": "MedicalClinic", "name": "...", "medicalSpecialty": "Dermatology", "address": {...}}',
    },
    (Industry.PROFESSIONAL_SERVICES, Trigger.LOW_SCHEMA): {
        "title": "Add ProfessionalService schema",
        "example": '{"@type": "ProfessionalService", "name": "...", "areaServed": "...", "address": {...}}',
    },
    (Industry.PROFESSIONAL_SERVICES, Trigger.LOW_AI_ANALYSIS): {
        "description": "State credentials, case results and years of experience explicitly.",
    },
}


def get_template(trigger: Trigger, industry: Industry = Industry.GENERIC) -> RecommendationTemplate:
    """Template for a trigger with any industry text applied."""
    template = RECOMMENDATION_TEMPLATES[trigger]
    overrides = INDUSTRY_OVERRIDES.get((industry, trigger))
    if overrides:
        template = replace(template, **overrides)
    return template
