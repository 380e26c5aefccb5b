"""Lesson plan generation module.

Generates, digitises and edits lesson plans in the CAPS (Curriculum and
Assessment Policy Statement) format used by South African schools for grades
8 to 12.
"""

import logging
from typing import List, Optional

from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage

from config import AI_MAX_TOKENS, LESSON_PLAN_TEMPERATURE
from core.exceptions import ValidationError
from utils.ai_gateway import AIGateway

logger = logging.getLogger(__name__)

CAPS_LESSON_PLAN_FORMAT = """
═══════════════════════════════════════════════════════════════════════════════
                         CAPS LESSON PLAN FORMAT (Grades 8-12)
═══════════════════════════════════════════════════════════════════════════════

SCHOOL: [School Name]
SUBJECT: [Subject Name]
GRADE: [Grade Level]
TOPIC: [Topic/Theme]
DATE: [Date]
DURATION: [Duration in minutes]
TEACHER: [Teacher Name]

───────────────────────────────────────────────────────────────────────────────
1. CAPS REFERENCE
───────────────────────────────────────────────────────────────────────────────
Content Area: [CAPS Content Area]
Specific Topic: [CAPS Specific Topic]
Week/Term: [Week number / Term number]

───────────────────────────────────────────────────────────────────────────────
2. LEARNING OBJECTIVES (CAPS-aligned)
───────────────────────────────────────────────────────────────────────────────
By the end of this lesson, learners should be able to:
• [Objective 1 - use Bloom's taxonomy verbs: explain, demonstrate, analyze, etc.]
• [Objective 2]
• [Objective 3]

───────────────────────────────────────────────────────────────────────────────
3. PRIOR KNOWLEDGE
───────────────────────────────────────────────────────────────────────────────
Learners should already know:
• [Pre-requisite knowledge 1]
• [Pre-requisite knowledge 2]

Baseline Assessment Questions:
• [Quick question to check readiness]

───────────────────────────────────────────────────────────────────────────────
4. RESOURCES / LTSM (Learner Teacher Support Materials)
───────────────────────────────────────────────────────────────────────────────
Teacher Resources:
• [Textbook, page numbers]
• [Visual aids, charts, models]
• [Technology/media]

Learner Resources:
• [Workbook, worksheets]
• [Stationery, equipment]

───────────────────────────────────────────────────────────────────────────────
5. LESSON PHASES
───────────────────────────────────────────────────────────────────────────────

PHASE 1: INTRODUCTION                                              [10-15 min]
Teacher Activities:
• [Attention grabber / hook activity]
• [Link to prior knowledge]
• [State learning objectives clearly]

Learner Activities:
• [Respond to questions]
• [Share prior knowledge]

PHASE 2: DEVELOPMENT / DIRECT INSTRUCTION                          [20-30 min]
Teacher Activities:
• [Explain key concepts step-by-step]
• [Demonstrate with examples]
• [Use questioning techniques]
• [Check for understanding]

Learner Activities:
• [Take notes]
• [Participate in discussions]
• [Complete guided practice]

Differentiation Strategies:
• Struggling learners: [Support strategies]
• Advanced learners: [Extension activities]

PHASE 3: PRACTICE / APPLICATION                                    [10-15 min]
Individual/Group Activities:
• [Practice exercises]
• [Problem-solving tasks]
• [Group work activities]

Teacher Role:
• [Monitor and support]
• [Provide feedback]

PHASE 4: CONSOLIDATION / CONCLUSION                                [5-10 min]
• [Summarize key learning points]
• [Address misconceptions]
• [Link to next lesson]
• [Assign homework/extended learning]

───────────────────────────────────────────────────────────────────────────────
6. ASSESSMENT
───────────────────────────────────────────────────────────────────────────────
Formative Assessment:
• [Observation during lesson]
• [Questioning]
• [Quick quiz/exit ticket]

Success Criteria:
• [How will you know learners achieved objectives?]

Homework / Extended Learning:
• [Task description]
• [Due date]

───────────────────────────────────────────────────────────────────────────────
7. EXPANDED OPPORTUNITY ACTIVITIES
───────────────────────────────────────────────────────────────────────────────
For Remediation:
• [Activities for learners who didn't achieve objectives]

For Enrichment:
• [Activities for learners who need extension]

───────────────────────────────────────────────────────────────────────────────
8. TEACHER REFLECTION (Post-lesson)
───────────────────────────────────────────────────────────────────────────────
□ Were the learning objectives achieved?
□ What worked well?
□ What needs improvement?
□ Notes for next lesson:

═══════════════════════════════════════════════════════════════════════════════
"""

GENERATE_SYSTEM_PROMPT = f"""You are an expert South African CAPS (Curriculum and Assessment Policy Statement) curriculum designer and experienced teacher.
Create detailed, engaging, and pedagogically sound lesson plans using the official CAPS format.

Guidelines:
- Follow CAPS objectives and assessment standards for the specified subject and grade
- Include clear learning objectives using Bloom's taxonomy verbs
- Design activities that promote critical thinking and learner engagement
- Consider diverse learning styles and abilities
- Include formative assessment opportunities
- Provide practical examples relevant to South African context
- Include cross-curricular connections where relevant

Use this EXACT format structure:
{CAPS_LESSON_PLAN_FORMAT}"""

EXTRACT_SYSTEM_PROMPT = f"""You are an expert at reading and digitizing lesson plans from images.
Extract ALL content from the image and format it into the official CAPS lesson plan format.
Preserve all information from the original while organizing it into the proper structure.

Use this exact format:
{CAPS_LESSON_PLAN_FORMAT}

Fill in all sections based on what you can see in the image. If a section is not visible or present,
mark it as "[To be completed]" rather than making up content."""

EDIT_WITH_IMAGE_SYSTEM_PROMPT = f"""You are an expert South African CAPS curriculum designer.
The teacher has an existing lesson plan and wants to modify it based on their instructions and/or a reference image.
Make the requested changes while maintaining the CAPS lesson plan format structure.

Official CAPS format:
{CAPS_LESSON_PLAN_FORMAT}"""

EDIT_SYSTEM_PROMPT = f"""You are an expert South African CAPS curriculum designer.
The teacher has an existing lesson plan and wants to modify it based on their instructions.
Make the requested changes while maintaining the CAPS lesson plan format structure.
If the current format doesn't match CAPS format, convert it while making the requested changes.

Official CAPS format:
{CAPS_LESSON_PLAN_FORMAT}"""


def _image_message(text: str, image_url: str) -> HumanMessage:
    return HumanMessage(
        content=[
            {"type": "text", "text": text},
            {"type": "image_url", "image_url": {"url": image_url}},
        ]
    )


class LessonPlanGenerator:
    """Produce CAPS lesson plans through the AI gateway."""

    def __init__(
        self,
        gateway: AIGateway,
        temperature: float = LESSON_PLAN_TEMPERATURE,
        max_tokens: int = AI_MAX_TOKENS,
    ):
        """Initialize LessonPlanGenerator.

        Args:
            gateway: AI gateway used for the completion call.
            temperature: Sampling temperature for every mode.
            max_tokens: Completion length limit.
        """
        self.gateway = gateway
        self.temperature = temperature
        self.max_tokens = max_tokens

    def _run(self, messages: List[BaseMessage]) -> str:
        content = self.gateway.complete(
            messages, temperature=self.temperature, max_tokens=self.max_tokens
        )
        logger.info("Lesson plan operation completed successfully")
        return content

    def generate(self, subject: Optional[str], grade: Optional[str], topic: Optional[str]) -> str:
        """Write a new lesson plan.

        Raises:
            ValidationError: If subject, grade or topic is missing.
        """
        if not subject or not grade or not topic:
            raise ValidationError("Missing required fields: subject, grade, topic")

        logger.info("Generating lesson plan for %s Grade %s: %s", subject, grade, topic)
        user_prompt = f"""Create a comprehensive CAPS-aligned lesson plan for:

Subject: {subject}
Grade: {grade}
Topic: {topic}

Generate a complete lesson plan following the official CAPS format provided.
Fill in ALL sections with specific, practical content that a teacher can use immediately.
Include actual examples, specific questions, and detailed activities."""
        return self._run(
            [SystemMessage(content=GENERATE_SYSTEM_PROMPT), HumanMessage(content=user_prompt)]
        )

    def extract(self, image_url: Optional[str]) -> str:
        """Digitise a photographed or scanned lesson plan.

        Args:
            image_url: Data URL (``data:image/...;base64,...``) or http URL.

        Raises:
            ValidationError: If no image is given.
        """
        if not image_url:
            raise ValidationError("An image of the lesson plan is required")

        logger.info("Extracting lesson plan from uploaded image")
        return self._run(
            [
                SystemMessage(content=EXTRACT_SYSTEM_PROMPT),
                _image_message(
                    "Please extract and digitize this lesson plan into the official CAPS format:",
                    image_url,
                ),
            ]
        )

    def edit(
        self,
        current_plan: Optional[str],
        instruction: Optional[str] = None,
        image_url: Optional[str] = None,
    ) -> str:
        """Revise an existing plan from an instruction and/or reference image.

        Without an instruction or image the plan is only converted to CAPS
        format.

        Raises:
            ValidationError: If there is no current plan.
        """
        if not current_plan:
            raise ValidationError("The current lesson plan is required for editing")

        logger.info("Editing lesson plan based on description")
        if image_url:
            text = (
                f"Here is my current lesson plan:\n\n{current_plan}\n\n"
                "Please make changes based on what you see in this image and/or these "
                f"instructions: {instruction or 'Update based on the image'}"
            )
            return self._run(
                [
                    SystemMessage(content=EDIT_WITH_IMAGE_SYSTEM_PROMPT),
                    _image_message(text, image_url),
                ]
            )

        if instruction:
            text = (
                f"Here is my current lesson plan:\n\n{current_plan}\n\n"
                f"Please make these changes: {instruction}"
            )
        else:
            text = f"Please convert this to proper CAPS format:\n\n{current_plan}"
        return self._run([SystemMessage(content=EDIT_SYSTEM_PROMPT), HumanMessage(content=text)])
