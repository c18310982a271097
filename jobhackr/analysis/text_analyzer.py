"""Keyword-dictionary text analysis for CVs and job descriptions.

Every operation here is a total function: missing or empty text yields empty
lists and default categories, never an exception.
"""

import logging
import re

from jobhackr.analysis.keywords import KeywordDictionaries, get_default_dictionaries
from jobhackr.schemas.cv import CriteriaSuggestion, CVAnalysis, CVValidation, SalaryRange
from jobhackr.schemas.job import JobPosting

logger = logging.getLogger(__name__)

DEFAULT_EXPERIENCE = "mid"
DEFAULT_LANGUAGE = "english"

# Points added to the CV score per experience bucket
EXPERIENCE_BONUS = {"junior": 5, "mid": 10, "senior": 20, "executive": 15}

# Analyzer buckets expressed in the scorer's experience vocabulary
LEVEL_FOR_SCORING = {"junior": "entry", "mid": "mid", "senior": "senior", "executive": "executive"}

_YEARS_PATTERN = re.compile(
    r"(\d+)\+?[\s-]*(?:years?|yrs?)\s*(?:of\s*)?(?:experience|work)",
    re.IGNORECASE,
)

# "30%", "3x", "$2M", "10 thousand users"
_QUANTIFIED_PATTERN = re.compile(
    r"\d+%|\d+x|\$\d+|\d+\s*(?:million|thousand|users|clients)",
    re.IGNORECASE,
)


def _normalize(text: str | None) -> str:
    return (text or "").lower()


class TextAnalyzer:
    """Extracts skills, titles, industries and levels from free text.

    Args:
        dictionaries: Keyword tables to match against. Defaults to the
            process-wide dictionaries loaded from keywords.json.
    """

    def __init__(self, dictionaries: KeywordDictionaries | None = None):
        self.dictionaries = dictionaries or get_default_dictionaries()

    def extract_skills(self, text: str | None) -> list[str]:
        """Extract skills by case-insensitive substring match.

        Both the canonical category and the specific keyword that matched are
        kept, deduplicated, in dictionary order.
        """
        normalized = _normalize(text)
        found: list[str] = []

        for category, keywords in self.dictionaries.skills.items():
            for keyword in keywords:
                if keyword.lower() in normalized:
                    if category not in found:
                        found.append(category)
                    if keyword != category and keyword not in found:
                        found.append(keyword)

        return found

    def extract_job_titles(self, text: str | None) -> list[str]:
        """Extract job-title categories mentioned in the text."""
        return self._match_categories(_normalize(text), self.dictionaries.job_titles)

    def extract_industries(self, text: str | None) -> list[str]:
        """Extract industry categories mentioned in the text."""
        return self._match_categories(_normalize(text), self.dictionaries.industries)

    def determine_experience_level(self, text: str | None) -> str:
        """Classify text as junior, mid, senior or executive.

        The bucket with the most indicator hits wins. Ties between the top
        buckets, and text with no hits at all, fall back to "mid".
        """
        hits = self._experience_hits(_normalize(text))
        best = max(hits.values(), default=0)
        if best == 0:
            return DEFAULT_EXPERIENCE

        leaders = [level for level, count in hits.items() if count == best]
        if len(leaders) > 1:
            return DEFAULT_EXPERIENCE
        return leaders[0]

    def extract_education(self, text: str | None) -> list[str]:
        normalized = _normalize(text)
        return [keyword for keyword in self.dictionaries.education if keyword in normalized]

    def extract_languages(self, text: str | None) -> list[str]:
        normalized = _normalize(text)
        return [keyword for keyword in self.dictionaries.languages if keyword in normalized]

    def detect_language(self, text: str | None) -> str:
        """Guess the language of a job description from indicator words.

        Counts whole-word indicator hits per language. The highest count
        wins; ties are broken french > spanish > german, and text with no
        hits is english.
        """
        normalized = _normalize(text)
        indicators = self.dictionaries.language_indicators

        counts = {
            language: sum(
                1
                for word in indicators.get(language, ())
                if re.search(rf"\b{re.escape(word)}\b", normalized)
            )
            for language in ("french", "spanish", "german")
        }
        french, spanish, german = counts["french"], counts["spanish"], counts["german"]

        if french > 0 and french >= spanish and french >= german:
            return "french"
        if spanish > 0 and spanish >= german:
            return "spanish"
        if german > 0:
            return "german"
        return DEFAULT_LANGUAGE

    def extract_years_of_experience(self, text: str | None) -> int | None:
        """Largest 'N years of experience' figure in the text, if any."""
        years = [int(match) for match in _YEARS_PATTERN.findall(text or "")]
        return max(years) if years else None

    def calculate_cv_score(
        self,
        skills: list[str],
        experience: str,
        job_titles: list[str],
        education: list[str],
    ) -> int:
        """Score CV strength from 0 to 100.

        Base 50, plus up to 30 for skills, an experience bonus, up to 10 for
        job titles and up to 10 for education.
        """
        score = 50
        score += min(len(skills) * 2, 30)
        score += EXPERIENCE_BONUS.get(experience, EXPERIENCE_BONUS[DEFAULT_EXPERIENCE])
        score += min(len(job_titles) * 2, 10)
        score += min(len(education) * 2, 10)
        return min(score, 100)

    def analyze_cv(self, cv_text: str | None) -> CVAnalysis:
        """Run every extractor over a CV and summarize the result."""
        skills = self.extract_skills(cv_text)
        experience = self.determine_experience_level(cv_text)
        job_titles = self.extract_job_titles(cv_text)
        industries = self.extract_industries(cv_text)
        education = self.extract_education(cv_text)
        languages = self.extract_languages(cv_text)
        score = self.calculate_cv_score(skills, experience, job_titles, education)

        logger.debug(
            f"CV analysed: {len(skills)} skills, {experience} level, "
            f"{len(job_titles)} title categories, score {score}"
        )

        return CVAnalysis(
            skills=skills,
            experience=experience,
            years_of_experience=self.extract_years_of_experience(cv_text),
            job_titles=job_titles,
            industries=industries,
            education=education,
            languages=languages,
            score=score,
            strengths=self._identify_strengths(skills, experience, job_titles),
            improvements=self._suggest_improvements(skills, experience),
            writing_suggestions=self.suggest_cv_improvements(cv_text),
            summary=self._summarize(skills, experience, job_titles, score),
        )

    def suggest_criteria(self, analysis: CVAnalysis) -> CriteriaSuggestion:
        """Propose job search criteria from a CV analysis."""
        base_salary = 50000
        if "senior" in analysis.experience or "lead" in analysis.experience:
            base_salary = 80000
        elif "mid" in analysis.experience or "experienced" in analysis.experience:
            base_salary = 65000

        high_value = set(self.dictionaries.high_value_skills)
        if any(skill.lower() in high_value for skill in analysis.skills):
            base_salary += 15000

        reasoning = (
            f"Based on your CV analysis, {len(analysis.skills)} relevant skills and "
            f"{len(analysis.job_titles)} job title matches were found. Your experience level "
            f"appears to be {analysis.experience}. The suggested salary range reflects "
            "market rates for your skill set and experience level."
        )

        return CriteriaSuggestion(
            suggested_job_titles=analysis.job_titles[:5],
            suggested_skills=analysis.skills[:10],
            suggested_industries=analysis.industries[:3],
            suggested_salary_range=SalaryRange(min=base_salary, max=base_salary + 30000),
            reasoning=reasoning,
        )

    def validate_cv_content(self, cv_text: str | None) -> CVValidation:
        """Check that CV text carries enough material to be useful."""
        content = cv_text or ""
        lowered = content.lower()
        issues: list[str] = []
        suggestions: list[str] = []
        score = 0

        if len(content) < 500:
            issues.append("CV content is too short")
            suggestions.append("Add more details about your experience and skills")
        else:
            score += 20

        if "@" in content or "email" in lowered:
            score += 10
        else:
            issues.append("No contact information found")
            suggestions.append("Include your email address")

        if len(self.extract_skills(content)) >= 5:
            score += 30
        else:
            issues.append("Limited technical skills mentioned")
            suggestions.append("List more specific technical skills")

        if "experience" in lowered or "worked" in lowered:
            score += 25
        else:
            issues.append("No work experience mentioned")
            suggestions.append("Include your work experience")

        if "education" in lowered or "degree" in lowered:
            score += 15
        else:
            suggestions.append("Consider adding your educational background")

        return CVValidation(
            is_valid=score >= 50,
            score=score,
            issues=issues,
            suggestions=suggestions,
        )

    def suggest_cv_improvements(self, cv_text: str | None) -> list[str]:
        """Writing advice for a CV, one suggestion per missing ingredient.

        Looks for quantified achievements, action verbs, current
        technologies or methodologies, and soft skills.
        """
        content = cv_text or ""
        lowered = content.lower()
        suggestions = []

        if not _QUANTIFIED_PATTERN.search(content):
            suggestions.append(
                'Add quantified achievements (e.g., "Improved performance by 30%", '
                '"Managed team of 5 developers")'
            )
        if not any(verb in lowered for verb in self.dictionaries.action_verbs):
            suggestions.append("Use strong action verbs to describe your accomplishments")
        if not any(term in lowered for term in self.dictionaries.modern_practices):
            suggestions.append(
                "Mention modern technologies and methodologies you have experience with"
            )
        if not any(skill in lowered for skill in self.dictionaries.soft_skills):
            suggestions.append(
                "Include relevant soft skills like leadership, communication, or teamwork"
            )

        return suggestions

    def enrich_job(self, job: JobPosting) -> JobPosting:
        """Fill a posting's missing skills, industry and level from its text.

        Fields already set on the posting are left untouched. The experience
        level is only filled when the text carries level indicators, so that
        postings without any keep the permissive "not specified" default.
        """
        text = f"{job.title} {job.description}"
        updates: dict = {}

        if not job.skills:
            skills = self.extract_skills(text)
            if skills:
                updates["skills"] = skills

        if not job.industry:
            industries = self.extract_industries(text)
            if industries:
                updates["industry"] = industries[0]

        if not job.experience_level and any(self._experience_hits(_normalize(text)).values()):
            level = self.determine_experience_level(text)
            updates["experience_level"] = LEVEL_FOR_SCORING[level]

        if not updates:
            return job
        return job.model_copy(update=updates)

    def _match_categories(self, normalized: str, mapping: dict[str, tuple[str, ...]]) -> list[str]:
        found: list[str] = []
        for category, keywords in mapping.items():
            if category in found:
                continue
            if any(keyword.lower() in normalized for keyword in keywords):
                found.append(category)
        return found

    def _experience_hits(self, normalized: str) -> dict[str, int]:
        return {
            level: sum(1 for keyword in keywords if keyword in normalized)
            for level, keywords in self.dictionaries.experience_levels.items()
        }

    def _identify_strengths(
        self, skills: list[str], experience: str, job_titles: list[str]
    ) -> list[str]:
        strengths = []
        if len(skills) >= 10:
            strengths.append("Diverse technical skill set")
        if experience in ("senior", "executive"):
            strengths.append("Strong leadership experience")
        if "fullstack" in job_titles:
            strengths.append("Full-stack development capabilities")
        if any(cloud in skills for cloud in ("aws", "azure", "gcp")):
            strengths.append("Cloud computing expertise")
        return strengths

    def _suggest_improvements(self, skills: list[str], experience: str) -> list[str]:
        improvements = []
        if len(skills) < 5:
            improvements.append("Consider adding more technical skills")
        if "git" not in skills:
            improvements.append("Add version control experience")
        if experience == "junior":
            improvements.append("Highlight specific projects and achievements")
        return improvements

    def _summarize(
        self, skills: list[str], experience: str, job_titles: list[str], score: int
    ) -> str:
        focus = ", ".join(job_titles[:3]) or "no specific role"
        return (
            f"This CV shows {experience} level experience with {len(skills)} technical skills "
            f"identified. Primary focus areas include {focus}. "
            f"Overall CV strength score: {score}/100."
        )
