OPTIMIZE_PROMPT = """You are an HR specialist at EIV Education, a company that recruits native English teachers.

TASK:
1. Extract the candidate's information from the CV.
2. Rewrite the CV content so it fits the Job Description (JD) as closely as possible, in EIV's professional house style.
3. Describe teaching experience with standard ELT terminology (ESL, TEFL, TESOL, Classroom Management, Lesson Planning, ...).
4. Fill sidebarInfo with the candidate's full name, nationality and gender. Use "N/A" when the CV does not say.
5. Write each education item as one line: degree or certificate, institution, year.
6. List experience in reverse chronological order. Each entry has title, company, period and bullet points.

A4 LAYOUT RULES (VERY IMPORTANT):
- Prefer fitting everything on a single page when the amount of experience allows it. Summarize older or less relevant roles so page one does not overflow.
- If a second page is unavoidable, it must hold at least three quarters of the last experience entry or at least two complete entries. Never leave one or two stray lines on page two.
- Adjust the number of bullet points:
  + add detail when the CV is short, so page one looks full;
  + trim or tighten bullets when the CV overflows page one only slightly.
- Goal: a balanced, professional, well filled CV.

7. matchScore is 0-100: how well the candidate fits the JD.
8. keyChanges lists what you changed, suggestedKeywords lists JD keywords worth adding, missingSkills lists JD requirements the candidate lacks, strengths lists the candidate's best selling points.
9. optimizedCV is the whole rewritten CV as plain text.

Return JSON that follows the response schema exactly."""

NOTES_TEMPLATE = """ADDITIONAL NOTES FROM THE RECRUITER (take these into account, they override the CV where they conflict):
{notes}"""

REFINE_PROMPT = """You are an HR specialist at EIV Education. Below is a CV that was already standardized to the EIV template, as JSON.
Apply the recruiter's instruction and return the complete updated CV as JSON with exactly the same structure.
Keep every field that the instruction does not touch. Keep the A4 layout rules: page one well filled, never a near-empty page two.

RECRUITER INSTRUCTION:
{instruction}

CURRENT CV (JSON):
{cv_json}"""

CROP_PROMPT = """Crop this photo into a professional headshot for a CV.
Portrait orientation, 3:4 aspect ratio, head and shoulders centered, face clearly visible.
Do not alter the person's appearance, only crop and frame. Return only the image."""

CV_RESULT_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "matchScore": {
            "type": "NUMBER",
            "description": "A score from 0-100 indicating how well the CV matches the JD.",
        },
        "sidebarInfo": {
            "type": "OBJECT",
            "properties": {
                "name": {"type": "STRING"},
                "nationality": {"type": "STRING"},
                "gender": {"type": "STRING"},
            },
            "required": ["name", "nationality", "gender"],
        },
        "education": {"type": "ARRAY", "items": {"type": "STRING"}},
        "experience": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "title": {"type": "STRING"},
                    "company": {"type": "STRING"},
                    "period": {"type": "STRING"},
                    "points": {"type": "ARRAY", "items": {"type": "STRING"}},
                },
                "required": ["title", "company", "period", "points"],
            },
        },
        "optimizedCV": {"type": "STRING"},
        "keyChanges": {"type": "ARRAY", "items": {"type": "STRING"}},
        "suggestedKeywords": {"type": "ARRAY", "items": {"type": "STRING"}},
        "missingSkills": {"type": "ARRAY", "items": {"type": "STRING"}},
        "strengths": {"type": "ARRAY", "items": {"type": "STRING"}},
    },
    "required": [
        "matchScore",
        "sidebarInfo",
        "education",
        "experience",
        "optimizedCV",
        "keyChanges",
        "suggestedKeywords",
        "missingSkills",
        "strengths",
    ],
}
