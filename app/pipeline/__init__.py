"""
Pipeline modules for the eligibility search cascade.

Stage 0: Query Interpretation   (query_interpreter.py, vocabulary.py)
Stages 1-4: Candidate Cascade   (stages.py: localized, relaxed, fuzzy, fallback)
Stage 5: Scoring                (scorer.py)
Stage 6: Response Mapping       (response_mapper.py)

Orchestrated by: orchestrator.py
"""
