from .sink import CommandPublishSink, DirectoryPublishSink, PublishSink, build_sink, ref_slug

__all__ = ["CommandPublishSink", "DirectoryPublishSink", "PublishSink", "build_sink", "ref_slug"]
