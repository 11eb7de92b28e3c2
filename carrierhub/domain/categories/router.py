"""Category router - public list of consultant categories"""

from fastapi import APIRouter

from ...models import ConsultantType
from ...schemas import success_response

router = APIRouter(prefix="/api/categories", tags=["Categories"])

CATEGORIES = [
    {
        "type": ConsultantType.CAREER_GUIDANCE.value,
        "title": "Career Guidance",
        "description": "Professional career counseling and guidance to help you choose the right career path based on your interests, skills, and market trends.",
    },
    {
        "type": ConsultantType.COLLEGE_COURSE.value,
        "title": "College Course Selection",
        "description": "Expert advice on selecting the right college and course that aligns with your career goals and academic performance.",
    },
    {
        "type": ConsultantType.EXAM_PREPARATION.value,
        "title": "Exam Preparation",
        "description": "Comprehensive preparation strategies and study plans for various competitive exams and entrance tests.",
    },
    {
        "type": ConsultantType.STUDY_ABROAD.value,
        "title": "Study Abroad",
        "description": "Complete guidance for studying abroad including university selection, application process, visa assistance, and scholarship opportunities.",
    },
    {
        "type": ConsultantType.SKILL_MENTORSHIP.value,
        "title": "Skill Mentorship",
        "description": "Personalized mentorship to develop industry-relevant skills and enhance your professional capabilities.",
    },
    {
        "type": ConsultantType.JOB_PLACEMENT.value,
        "title": "Job Placement",
        "description": "Career placement assistance including resume building, interview preparation, and job search strategies.",
    },
    {
        "type": ConsultantType.GOVERNMENT_JOBS.value,
        "title": "Government Jobs",
        "description": "Specialized guidance for government job preparation including exam strategies, application process, and interview techniques.",
    },
    {
        "type": ConsultantType.PERSONAL_GROWTH.value,
        "title": "Personal Growth",
        "description": "Personal development coaching to enhance soft skills, confidence, and overall personality development.",
    },
    {
        "type": ConsultantType.ALTERNATIVE_CAREERS.value,
        "title": "Alternative Careers",
        "description": "Explore unconventional career paths and emerging opportunities in various industries and sectors.",
    },
]


@router.get("")
async def get_categories():
    return success_response("Categories retrieved successfully", categories=CATEGORIES)
