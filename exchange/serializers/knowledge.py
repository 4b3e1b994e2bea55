from rest_framework import serializers

from exchange.models import KnowledgeArticle


class ArticleCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    category = serializers.ChoiceField(choices=KnowledgeArticle.CATEGORY_CHOICES)
    content = serializers.CharField(max_length=20000)


class ArticleListQuerySerializer(serializers.Serializer):
    category = serializers.ChoiceField(choices=KnowledgeArticle.CATEGORY_CHOICES, required=False)
