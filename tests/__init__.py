"""Test suite for course-catalog-reconciler.

This package contains tests for all modules:
- test_normalization: Field normalizer, GPA classifier, school names
- test_models: Pydantic course and catalog models
- test_merger: Cross-source catalog merging
- test_semester_pairs: A/B semester-pair consolidation
- test_prerequisites: Matching rules and prerequisite resolution
- test_validation: Catalog validation and run reports
- test_pipeline: File I/O, pipeline runner and CLI
"""
