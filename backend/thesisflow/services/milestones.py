DEFAULT_MILESTONES: list[dict[str, str]] = [
    {"name": "Proposal", "description": "Complete thesis proposal and get approval"},
    {"name": "Literature Review", "description": "Complete comprehensive literature review"},
    {"name": "Methodology", "description": "Finalize research methodology"},
    {"name": "Data Collection", "description": "Complete data collection phase"},
    {"name": "Analysis", "description": "Analyze collected data and findings"},
    {"name": "Results", "description": "Write up results chapter"},
    {"name": "Discussion", "description": "Complete discussion and conclusions"},
    {"name": "Submission", "description": "Final thesis submission"},
]
