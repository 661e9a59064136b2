"""Evidence-aggregation and grading-analysis pipeline for student project submissions."""
