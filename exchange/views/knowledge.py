from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from exchange.permissions import get_principal
from exchange.serializers.knowledge import ArticleCreateSerializer, ArticleListQuerySerializer
from exchange.services import knowledge


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def knowledge_articles(request):
    if request.method == 'GET':
        q = ArticleListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        return Response(knowledge.list_articles(category=q.validated_data.get('category')))
    s = ArticleCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    article = knowledge.post_article(get_principal(request), **s.validated_data)
    return Response({'ok': True, 'message': 'Knowledge article posted successfully!',
                     'article': knowledge.serialize(article)}, status=status.HTTP_201_CREATED)
