from bio_generator.api.schemas import GenerationRequest

SYSTEM_PROMPT = (
    "You are an expert social media manager who writes short profile bios.\n"
    "Write one bio based on the user input below.\n"
    "Follow the requested bio type: a personal bio speaks as the person, a brand bio speaks for the brand.\n"
    "Match the requested tone.\n"
    "Use emojis only when 'Add Emojis' is true.\n"
    "Keep it under 160 characters, no hashtags unless they fit naturally.\n"
    "Output only the bio text, without quotes or explanations."
)


def build_instruction(request: GenerationRequest) -> str:
    return "\n".join(
        [
            f"User Input: {request.description},",
            f"Bio Type: {request.bio_type.value},",
            f"Bio Tone: {request.tone.value},",
            f"Add Emojis: {str(request.use_emojis).lower()}",
        ]
    )
