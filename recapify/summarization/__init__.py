from recapify.summarization.base import BaseSummarizer
from recapify.summarization.factory import SummarizerFactory
from recapify.summarization.file_summarizer import FileModeSummarizer
from recapify.summarization.text_summarizer import TextModeSummarizer

__all__ = ["BaseSummarizer", "FileModeSummarizer", "SummarizerFactory", "TextModeSummarizer"]
