import logging
from typing import Optional

import bleach

from exchange.exceptions import InvalidArgument
from exchange.models import KnowledgeArticle
from exchange.services.principal import Principal, require_hospital

logger = logging.getLogger(__name__)


def post_article(principal: Optional[Principal], *, title: str, category: str, content: str) -> KnowledgeArticle:
    principal = require_hospital(principal)
    title = bleach.clean((title or '').strip(), strip=True)
    content = bleach.clean((content or '').strip(), strip=True)
    if not title or not content:
        raise InvalidArgument('Title and content are required.')
    if category not in dict(KnowledgeArticle.CATEGORY_CHOICES):
        raise InvalidArgument('Invalid category.')
    article = KnowledgeArticle.objects.create(
        posting_hospital_id=principal.hospital_id, title=title, category=category, content=content,
    )
    logger.info('hospital %s posted article %s', principal.hospital_id, article.pk)
    return article


def serialize(article: KnowledgeArticle) -> dict:
    return {
        'id': article.pk,
        'postingHospital': {'id': article.posting_hospital_id, 'hospitalName': article.posting_hospital.name},
        'title': article.title,
        'category': article.category,
        'content': article.content,
        'createdAt': article.created_at.isoformat() if article.created_at else None,
    }


def list_articles(*, category: Optional[str] = None) -> list:
    qs = KnowledgeArticle.objects.select_related('posting_hospital')
    if category:
        qs = qs.filter(category=category)
    return [serialize(a) for a in qs.order_by('-created_at', '-id')]
