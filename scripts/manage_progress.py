"""
Manage stored movie progress from the command line.
Creates tables, exports/imports the progress map, and prints recommendations and stats.
"""

import sys
from pathlib import Path

# Add parent directory to path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

import argparse
import json
import logging

from movietracker_recommendation_service.models.database import init_db
from movietracker_recommendation_service.services import CatalogLoader, MovieTrackerService

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def export_progress(service: MovieTrackerService, output_path: Path) -> int:
    """
    Write the progress map to a JSON file.

    Args:
        service: Tracker service instance
        output_path: Destination file

    Returns:
        Number of records exported
    """
    progress = service.export_progress()

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(progress, f, indent=2)

    logger.info(f"✓ Exported {len(progress)} progress records to {output_path}")
    return len(progress)


def import_progress(service: MovieTrackerService, input_path: Path) -> int:
    """
    Replace stored progress with the contents of a JSON file.

    Args:
        service: Tracker service instance
        input_path: Exported progress file

    Returns:
        Number of records imported
    """
    if not input_path.exists():
        raise FileNotFoundError(f"Progress file not found: {input_path}")

    with open(input_path, encoding='utf-8') as f:
        count = service.import_progress(f.read())

    logger.info(f"✓ Imported {count} progress records from {input_path}")
    return count


def show_recommendations(service: MovieTrackerService, limit: int) -> list:
    """Log the current top recommendations."""
    profile, recommendations = service.get_profile_and_recommendations(limit=limit)

    logger.info("=" * 70)
    logger.info("RECOMMENDATIONS")
    logger.info("=" * 70)
    logger.info(
        f"Preferred category: {profile.preferred_category.value}, "
        f"preferred era: {profile.preferred_era.value}"
    )

    if not recommendations:
        logger.info("You've watched all movies!")
    elif not profile.has_signal:
        logger.info("No ratings yet - showing unwatched movies in catalog order")

    for i, rec in enumerate(recommendations, 1):
        logger.info(f"  {i}. {rec.movie.title} ({rec.movie.year}) - {rec.score}%")

    return recommendations


def show_stats(service: MovieTrackerService) -> dict:
    """Log progress statistics."""
    stats = service.get_stats()
    average = stats['average_rating'] if stats['average_rating'] is not None else '-'

    logger.info(f"Total movies: {stats['total_movies']}")
    logger.info(f"Watched: {stats['watched_count']}")
    logger.info(f"Unwatched: {stats['unwatched_count']}")
    logger.info(f"Average rating: {average}")
    return stats


def main():
    """Main execution function."""
    parser = argparse.ArgumentParser(
        description='Manage movie tracker progress'
    )
    parser.add_argument(
        '--catalog',
        type=str,
        default=None,
        help='Catalog path or URL (default: CATALOG_SOURCE config)'
    )
    parser.add_argument(
        '--namespace',
        type=str,
        default=None,
        help='Progress namespace (default: PROGRESS_NAMESPACE config)'
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    subparsers.add_parser('init-db', help='Create database tables')

    export_parser = subparsers.add_parser('export', help='Export progress to a JSON file')
    export_parser.add_argument(
        '--output',
        type=str,
        default='movie-progress.json',
        help='Output file (default: movie-progress.json)'
    )

    import_parser = subparsers.add_parser('import', help='Import progress from a JSON file')
    import_parser.add_argument(
        '--input',
        type=str,
        required=True,
        help='Exported progress file'
    )

    recommend_parser = subparsers.add_parser('recommend', help='Show recommendations')
    recommend_parser.add_argument(
        '--limit',
        type=int,
        default=None,
        help='Number of recommendations (default: RECOMMENDATION_LIMIT config)'
    )

    subparsers.add_parser('stats', help='Show progress statistics')

    args = parser.parse_args()

    try:
        if args.command == 'init-db':
            init_db()
            logger.info("✓ Database tables created")
            return

        service = MovieTrackerService(
            catalog_loader=CatalogLoader(source=args.catalog),
            namespace=args.namespace
        )

        if args.command == 'export':
            export_progress(service, Path(args.output))
        elif args.command == 'import':
            import_progress(service, Path(args.input))
        elif args.command == 'recommend':
            show_recommendations(service, args.limit)
        elif args.command == 'stats':
            show_stats(service)

    except Exception as e:
        logger.error(f"Error running {args.command}: {str(e)}", exc_info=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
