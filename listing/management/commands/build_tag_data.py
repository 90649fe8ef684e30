"""
Django management command to regenerate the per-language tag count files.
"""
import logging

from django.core.management import CommandError
from django.core.management.base import BaseCommand

from listing.content import (
    PostType, clear_caches, get_all_posts, tag_data_path, write_tag_counts,
)
from listing.tag_utils import count_tags

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """
    Django management command to write tag-data-<language>.json from the posts.
    """
    help = 'Write tag-data-<language>.json files with the current tag counts.'

    def add_arguments(self, parser):
        parser.add_argument(
            '--output-dir',
            type=str,
            help='Directory for the JSON files (defaults to settings.TAG_DATA_DIR).',
            default=None
        )

    def handle(self, *args, **options):
        output_dir = options['output_dir']
        posts = get_all_posts()
        for post_type in PostType:
            counts = count_tags(p for p in posts if p.post_type == post_type)
            filepath = tag_data_path(post_type, output_dir)
            try:
                write_tag_counts(filepath, counts)
            except OSError as e:
                logger.exception("Failed to write tag data file %s", filepath)
                raise CommandError(f"Failed to write tag data file '{filepath}': {e}") from e
            logger.info("Wrote %d tags to %s", len(counts), filepath)
            self.stdout.write(self.style.SUCCESS(f'{post_type.label}: {len(counts)} tags written to {filepath}'))
        clear_caches()
