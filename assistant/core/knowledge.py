from __future__ import annotations

from typing import Dict, FrozenSet, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class QuestionEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    question: str = Field(..., description="Exact question text, used as the lookup key")
    short_answer: str
    long_answer: str


QUESTIONS: Tuple[QuestionEntry, ...] = (
    QuestionEntry(
        question="How can I manage my chronic illness effectively?",
        short_answer="Consistent medication, healthy diet, and regular check-ups.",
        long_answer=(
            "Managing a chronic illness effectively involves a combination of consistent "
            "medication adherence, maintaining a balanced and nutritious diet, and scheduling "
            "regular check-ups with your healthcare provider. It's also important to stay "
            "informed about your condition, engage in regular physical activity as advised by "
            "your doctor, and have a support system in place for emotional and practical "
            "assistance."
        ),
    ),
    QuestionEntry(
        question="What lifestyle changes can help with chronic illness management?",
        short_answer="Healthy eating, regular exercise, and stress management.",
        long_answer=(
            "Adopting a healthy lifestyle is crucial for managing chronic illnesses. This "
            "includes eating a diet rich in fruits, vegetables, whole grains, and lean proteins "
            "while avoiding processed foods and excessive sugar. Regular physical activity, "
            "tailored to your abilities and condition, can improve overall health and reduce "
            "symptoms. Additionally, managing stress through techniques such as mindfulness, "
            "yoga, or counseling can significantly impact your well-being and ability to manage "
            "your illness."
        ),
    ),
    QuestionEntry(
        question="How important is medication adherence for chronic illness?",
        short_answer="Very important to control symptoms and prevent complications.",
        long_answer=(
            "Medication adherence is critical in controlling the symptoms of chronic illnesses "
            "and preventing complications. Taking your medications as prescribed ensures that "
            "you are getting the full benefit of the treatment, which can stabilize your "
            "condition and improve your quality of life. Skipping doses or not following the "
            "prescribed regimen can lead to worsening symptoms, progression of the illness, and "
            "even hospitalization. Always discuss any concerns or side effects with your "
            "healthcare provider to find the best treatment plan for you."
        ),
    ),
    QuestionEntry(
        question="Where can I find support for managing my chronic illness?",
        short_answer="Support groups, online communities, and healthcare providers.",
        long_answer=(
            "Support for managing chronic illness can be found through various resources. "
            "Joining support groups, either in person or online, can provide a sense of "
            "community and shared experiences that can be incredibly helpful. Online "
            "communities and forums are also great places to connect with others facing "
            "similar challenges. Additionally, your healthcare providers, including doctors, "
            "nurses, and counselors, can offer support and guidance tailored to your specific "
            "needs. Don't hesitate to reach out to family and friends as well, as having a "
            "robust support system is vital for managing chronic illnesses."
        ),
    ),
)

# Keys are the literal question strings; lookups are exact and case-sensitive.
QUESTION_TABLE: Dict[str, QuestionEntry] = {entry.question: entry for entry in QUESTIONS}

KEYWORDS: FrozenSet[str] = frozenset(
    {
        "chronic illness",
        "medication",
        "diet",
        "check-ups",
        "support system",
        "physical activity",
        "well-being",
        "health",
        "symptoms",
        "complications",
        "treatment",
        "condition",
        "healthy eating",
        "exercise",
        "stress management",
        "support groups",
        "online communities",
        "healthcare providers",
        "support",
        "management",
        "long-term",
        "persistent",
        "continuous",
        "illness",
        "chronic condition",
    }
)


def find_question(text: str) -> Optional[QuestionEntry]:
    """Return the entry whose question equals ``text`` exactly, if any.

    No trimming, case folding or fuzzy matching is applied.
    """
    return QUESTION_TABLE.get(text)


def common_questions() -> List[str]:
    return [entry.question for entry in QUESTIONS]
