"""
Podcast generation: two-host script writing and multi-speaker TTS.
"""

from .audio import (
    MissingAudioError,
    build_wave_header,
    convert_to_mp3,
    generate_podcast_audio,
    get_audio_duration,
    write_wave_file,
)
from .script import create_podcast_discussion, generate_podcast_script, sanitize_topic_for_filename

__all__ = [
    'MissingAudioError',
    'build_wave_header',
    'convert_to_mp3',
    'generate_podcast_audio',
    'get_audio_duration',
    'write_wave_file',
    'create_podcast_discussion',
    'generate_podcast_script',
    'sanitize_topic_for_filename',
]
