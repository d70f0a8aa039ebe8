from __future__ import annotations
import random
from datetime import datetime, timedelta

from jobhub.pipeline.canonical import SAMPLE, CanonicalJob
from jobhub.pipeline.normalizer import normalize

COMPANIES = [
    "Amazon", "Google", "Microsoft", "Meta", "Netflix", "Apple", "Tesla", "IBM", "Oracle",
    "Salesforce", "Adobe", "Intuit", "PayPal", "Spotify", "Uber", "Airbnb", "LinkedIn",
    "Zoom", "Slack", "Dropbox", "Shopify", "Square", "Stripe", "Atlassian", "MongoDB", "Snowflake",
    "Databricks", "Palantir", "Tableau", "Splunk", "Elastic", "Confluent", "Twilio", "Okta",
    "CrowdStrike", "Datadog", "New Relic", "PagerDuty", "GitHub", "GitLab", "Docker", "Red Hat",
    "Cisco", "Intel", "NVIDIA", "AMD", "Accenture", "Deloitte", "JPMorgan", "Goldman Sachs",
    "Bloomberg", "McKinsey", "Visa", "Mastercard",
]

TITLES = [
    "Data Engineer", "Data Scientist", "Data Analyst", "Senior Data Engineer", "Senior Data Scientist",
    "Junior Data Analyst", "Machine Learning Engineer", "AI Engineer", "Data Architect",
    "Business Intelligence Analyst", "Analytics Engineer", "ETL Developer", "Big Data Engineer",
    "Research Scientist", "Statistician", "Quantitative Analyst", "MLOps Engineer", "NLP Engineer",
    "Database Administrator", "Data Modeler", "Product Analyst", "Financial Analyst", "Business Analyst",
]

LOCATIONS = [
    "San Francisco, CA", "New York, NY", "Seattle, WA", "Austin, TX", "Boston, MA", "Chicago, IL",
    "Denver, CO", "Remote", "Hybrid Remote", "Los Angeles, CA", "Washington, DC", "Atlanta, GA",
]

TAG_COMBINATIONS = [
    ["Full time", "Senior level", "Remote"],
    ["Full time", "Junior level", "Remote"],
    ["Full time", "Middle level", "Remote"],
    ["Part time", "Middle level", "Remote"],
    ["Full time", "Senior level", "Full Day"],
    ["Full time", "Junior level", "Flexible schedule"],
    ["Full time", "Middle level", "Shift work"],
    ["Internship", "Junior level", "Remote"],
    ["Full time", "Senior level", "Project work"],
    ["Full time", "Middle level", "Distant work"],
]

HOURLY_RATES = [800, 850, 900, 950, 1000, 1050, 1100, 1150, 1200, 1250, 1300, 1350, 1400, 1450, 1500, 1600]


def generate_sample_jobs(count: int = 100, seed: int = 7, now: datetime | None = None) -> list[CanonicalJob]:
    """Deterministic mock listings shown when every source is unavailable."""
    rng = random.Random(seed)
    now = now or datetime.utcnow()
    used: set[tuple[str, str]] = set()
    jobs: list[CanonicalJob] = []

    for i in range(1, count + 1):
        company, title = rng.choice(COMPANIES), rng.choice(TITLES)
        while (company, title) in used and len(used) < len(COMPANIES) * len(TITLES):
            company, title = rng.choice(COMPANIES), rng.choice(TITLES)
        used.add((company, title))

        tags = list(rng.choice(TAG_COMBINATIONS))
        record = {
            "id": i,
            "company": company,
            "title": title,
            "location": rng.choice(LOCATIONS),
            "salary": f"${rng.choice(HOURLY_RATES)}/hr",
            "tags": tags,
            "experience": tags[1].replace(" level", ""),
            "workingSchedule": tags[0],
            "created_at": now - timedelta(days=rng.randint(0, 30)),
        }
        jobs.append(normalize(record, SAMPLE, now))
    return jobs
