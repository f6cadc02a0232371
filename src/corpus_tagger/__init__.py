"""corpus_tagger

Policy-driven labeling stage for streaming corpus pipelines.

Public API surface:
- corpus_tagger.stages.tagging.TaggingStage : the labeling stage
- corpus_tagger.stages.policy.LabelPolicy : when to (re)label a document
- corpus_tagger.backends : add/extend label backends
- corpus_tagger.reporting : lifecycle reporters (logging, analytics)
- corpus_tagger.pipeline.build.build_local : run the stage from a YAML config
- corpus_tagger.cli.main : CLI entrypoint

Backends and reporters are injected into the stage, so teams can own them separately.
"""
__all__ = ["__version__"]
__version__ = "0.2.0"
