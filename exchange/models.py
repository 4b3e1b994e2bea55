"""
Database models for the medical resource exchange.

A :class:`Hospital` owns an inventory made of an oxygen cylinder count,
one :class:`BloodStock` row per blood group and a list of discrete
:class:`OrganOffer` entries.  A :class:`ResourceRequest` is posted by
one hospital against the inventory of the others and moves through the
lifecycle ``Open -> Accepted/Rejected -> Closed``.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models


class BloodGroup(models.TextChoices):
    A_POS = 'A+', 'A+'
    A_NEG = 'A-', 'A-'
    B_POS = 'B+', 'B+'
    B_NEG = 'B-', 'B-'
    AB_POS = 'AB+', 'AB+'
    AB_NEG = 'AB-', 'AB-'
    O_POS = 'O+', 'O+'
    O_NEG = 'O-', 'O-'


class OrganName(models.TextChoices):
    KIDNEY = 'Kidney', 'Kidney'
    LIVER = 'Liver', 'Liver'
    HEART = 'Heart', 'Heart'
    LUNG = 'Lung', 'Lung'
    PANCREAS = 'Pancreas', 'Pancreas'
    CORNEA = 'Cornea', 'Cornea'


class User(AbstractUser):
    """Login account for either a hospital or a platform administrator.

    Hospital accounts carry a one-to-one :class:`Hospital` record; admin
    accounts do not.
    """
    ROLE_HOSPITAL = 'hospital'
    ROLE_ADMIN = 'admin'
    ROLE_CHOICES = [
        (ROLE_HOSPITAL, 'Hospital'),
        (ROLE_ADMIN, 'Administrator'),
    ]
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_HOSPITAL)

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class Hospital(models.Model):
    """A hospital and the scalar part of its inventory."""
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='hospital')
    name = models.CharField(max_length=255)
    email = models.EmailField(unique=True)
    address = models.CharField(max_length=500, blank=True)
    phone = models.CharField(max_length=32, blank=True)
    oxygen_cylinders = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.name} (#{self.pk})"


class BloodStock(models.Model):
    """Units of one blood group held by a hospital."""
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='blood_stock')
    blood_group = models.CharField(max_length=3, choices=BloodGroup.choices)
    units = models.PositiveIntegerField(default=0)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['hospital', 'blood_group'], name='uniq_blood_stock_group'),
        ]
        indexes = [
            models.Index(fields=['blood_group', 'units'], name='exchange_bl_blood_g_5c1e0a_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.hospital_id}:{self.blood_group}={self.units}"


class OrganOffer(models.Model):
    """A single organ available for transplant.  Consumed by deletion."""
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='organ_offers')
    organ_name = models.CharField(max_length=16, choices=OrganName.choices)
    blood_group = models.CharField(max_length=3, choices=BloodGroup.choices)
    age = models.PositiveIntegerField()
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['created_at', 'id']
        indexes = [
            models.Index(fields=['organ_name', 'blood_group'], name='exchange_or_organ_n_8d2f41_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.organ_name} {self.blood_group} @ {self.hospital_id}"


class ResourceRequest(models.Model):
    TYPE_OXYGEN = 'Oxygen'
    TYPE_BLOOD = 'Blood'
    TYPE_ORGAN = 'Organ'
    TYPE_CHOICES = ((TYPE_OXYGEN, 'Oxygen'), (TYPE_BLOOD, 'Blood'), (TYPE_ORGAN, 'Organ'))

    STATUS_OPEN = 'Open'
    STATUS_ACCEPTED = 'Accepted'
    STATUS_CLOSED = 'Closed'
    STATUS_REJECTED = 'Rejected'
    STATUS_CHOICES = (
        (STATUS_OPEN, 'Open'),
        (STATUS_ACCEPTED, 'Accepted'),
        (STATUS_CLOSED, 'Closed'),
        (STATUS_REJECTED, 'Rejected'),
    )

    requesting_hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='requests_made')
    providing_hospital = models.ForeignKey(
        Hospital, null=True, blank=True, on_delete=models.CASCADE, related_name='requests_handled'
    )
    request_type = models.CharField(max_length=10, choices=TYPE_CHOICES)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_OPEN, db_index=True)

    blood_group = models.CharField(max_length=3, choices=BloodGroup.choices, blank=True, null=True)
    quantity = models.PositiveIntegerField(blank=True, null=True)
    organ_name = models.CharField(max_length=16, choices=OrganName.choices, blank=True, null=True)
    description = models.TextField()

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['status', 'created_at'], name='exchange_re_status_3b7f9c_idx'),
            models.Index(fields=['requesting_hospital', 'created_at'], name='exchange_re_request_a41e27_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.request_type} request #{self.pk} ({self.status})"


class KnowledgeArticle(models.Model):
    CATEGORY_CHOICES = [
        ('Clinical', 'Clinical'),
        ('Administrative', 'Administrative'),
        ('Operational', 'Operational'),
        ('Other', 'Other'),
    ]
    posting_hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='articles')
    title = models.CharField(max_length=255)
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES)
    content = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.title} ({self.category})"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.IntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='exchange_au_action_7e55d2_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='exchange_au_object__0c93b8_idx'),
        ]

    def __str__(self):
        return f"{self.action}:{self.object_type}#{self.object_id} by {self.user_id}"
