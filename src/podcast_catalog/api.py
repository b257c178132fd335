"""
REST API for the Podcast Catalog.

Thin Flask layer over ``CatalogService``: parses requests, calls the
service, and maps catalog errors to JSON responses with stable status codes.
"""
from __future__ import annotations

import datetime as dt
import logging
from typing import Any, Dict, Optional

from flask import Blueprint, Flask, current_app, jsonify, request

from podcast_catalog.catalog.service import CatalogService
from podcast_catalog.config import Config, get_config
from podcast_catalog.errors import (
    CatalogError,
    ConflictError,
    FetchError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from podcast_catalog.models.entities import EpisodeFilters

logger = logging.getLogger(__name__)

api_bp = Blueprint('api', __name__, url_prefix='/api')

STATUS_BY_ERROR = {
    ValidationError: 400,
    NotFoundError: 404,
    ConflictError: 409,
    FetchError: 502,
    StorageError: 500,
}


def get_service() -> CatalogService:
    """Catalog service bound to the running app"""
    return current_app.extensions['podcast_catalog']


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@api_bp.errorhandler(CatalogError)
def handle_catalog_error(error: CatalogError):
    status = STATUS_BY_ERROR.get(type(error), 500)
    payload = error.to_dict()
    if isinstance(error, ConflictError) and error.existing is not None:
        payload['feed'] = error.existing.to_dict()
    if status >= 500:
        logger.error("API error (%s): %s", error.kind, error.message)
    return jsonify(payload), status


@api_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint"""
    return jsonify({
        'status': 'OK',
        'message': 'Podcast Catalog API is running',
        'timestamp': dt.datetime.now(dt.timezone.utc).isoformat(),
    })


@api_bp.route('/feeds', methods=['GET'])
def list_feeds():
    """List subscribed feeds with episode counts"""
    feeds = get_service().list_feeds()
    return jsonify({'feeds': [feed.to_dict() for feed in feeds]})


@api_bp.route('/feeds', methods=['POST'])
def add_feed():
    """Subscribe to a new feed"""
    feed = get_service().add_feed(_json_body().get('url'))
    return jsonify({
        'message': 'Feed added successfully',
        'feed': feed.to_dict(),
    }), 201


@api_bp.route('/feeds/<feed_id>', methods=['GET'])
def get_feed(feed_id: str):
    """One stored feed with its episodes"""
    return jsonify({'feed': get_service().get_feed(feed_id).to_dict()})


@api_bp.route('/feeds/<feed_id>', methods=['DELETE'])
def delete_feed(feed_id: str):
    """Delete a feed and its episodes' tags"""
    deleted = get_service().delete_feed(feed_id)
    return jsonify({
        'message': 'Feed deleted successfully',
        'deletedFeed': deleted.to_dict(),
    })


@api_bp.route('/feeds/<feed_id>/refresh', methods=['POST'])
def refresh_feed(feed_id: str):
    """Re-fetch a feed and replace its episodes"""
    feed = get_service().refresh_feed(feed_id)
    return jsonify({
        'message': 'Feed refreshed successfully',
        'feed': feed.to_dict(),
    })


@api_bp.route('/episodes', methods=['GET'])
def list_episodes():
    """List episodes across all feeds, filtered and newest first"""
    filters = EpisodeFilters(
        podcast_id=request.args.get('podcastId') or None,
        query=request.args.get('q') or None,
        tag=request.args.get('tag') or None,
    )
    episodes = get_service().list_episodes(filters)
    return jsonify({'episodes': [ep.to_dict() for ep in episodes]})


@api_bp.route('/episodes/<episode_id>/tags', methods=['PUT'])
def update_episode_tags(episode_id: str):
    """Replace the tags of one episode"""
    tags = get_service().set_episode_tags(episode_id, _json_body().get('tags'))
    return jsonify({
        'message': 'Tags updated successfully',
        'episodeId': episode_id,
        'tags': tags,
    })


@api_bp.route('/tags', methods=['GET'])
def list_tags():
    """All tags in use plus the per-episode index"""
    service = get_service()
    return jsonify({
        'tags': service.list_tags(),
        'tagsByEpisodeId': service.tags_by_episode(),
    })


def create_app(
    service: Optional[CatalogService] = None,
    config: Optional[Config] = None,
) -> Flask:
    """
    Build the Flask application.

    Args:
        service: Catalog service to serve (built from config when omitted)
        config: Application configuration (loaded when omitted)

    Returns:
        Configured Flask app
    """
    app = Flask(__name__)
    if service is None:
        service = CatalogService.from_config(config or get_config())
    app.extensions['podcast_catalog'] = service
    app.register_blueprint(api_bp)

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({
            'error': 'not_found',
            'message': f'Route {request.path} not found',
        }), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({
            'error': 'method_not_allowed',
            'message': f'HTTP method {request.method} is not supported on this endpoint',
        }), 405

    @app.errorhandler(500)
    def internal_error(error):
        return jsonify({'error': 'internal_error', 'message': 'Internal server error'}), 500

    return app
