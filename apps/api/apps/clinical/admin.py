from django.contrib import admin
from .models import Anamnesis, Consultation, Exam, Note, Patient, Prescription


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ['patient_name', 'nome', 'patient_email', 'patient_phone', 'doctor', 'favorite', 'is_deleted', 'created_at']
    list_filter = ['favorite', 'blood_type', 'patient_gender', 'is_deleted']
    search_fields = ['patient_name', 'nome', 'patient_email', 'patient_phone', 'celular', 'patient_cpf']
    readonly_fields = ['id', 'last_consultation_date', 'created_at', 'updated_at', 'deleted_at']
    autocomplete_fields = ['doctor', 'deleted_by_user']

    fieldsets = (
        ('Basic Info', {
            'fields': ('id', 'doctor', 'patient_name', 'nome', 'data_nascimento', 'patient_age', 'patient_gender', 'patient_cpf', 'patient_rg')
        }),
        ('Contact', {
            'fields': ('patient_phone', 'celular', 'fixo', 'patient_email', 'email')
        }),
        ('Address', {
            'fields': ('patient_address', 'endereco', 'cidade', 'estado', 'cep')
        }),
        ('Clinical Profile', {
            'fields': ('blood_type', 'tipo_sanguineo', 'height_cm', 'weight_kg', 'is_smoker', 'is_alcohol_consumer')
        }),
        ('Histories', {
            'fields': ('allergies', 'congenital_diseases', 'chronic_diseases', 'medications', 'surgical_history', 'family_history', 'vital_signs', 'emergency_contact', 'health_insurance')
        }),
        ('Notes', {
            'fields': ('notes', 'favorite', 'last_consultation_date')
        }),
        ('Soft Delete', {
            'fields': ('is_deleted', 'deleted_at', 'deleted_by_user')
        }),
        ('Audit', {
            'fields': ('created_at', 'updated_at')
        }),
    )


@admin.register(Consultation)
class ConsultationAdmin(admin.ModelAdmin):
    list_display = ['consultation_date', 'patient', 'consultation_type', 'status', 'doctor', 'is_deleted']
    list_filter = ['status', 'consultation_type', 'is_deleted']
    search_fields = ['reason_for_visit', 'diagnosis', 'patient__patient_name', 'patient__nome']
    readonly_fields = ['id', 'created_at', 'updated_at', 'deleted_at']
    autocomplete_fields = ['doctor', 'patient', 'deleted_by_user']
    date_hierarchy = 'consultation_date'


@admin.register(Anamnesis)
class AnamnesisAdmin(admin.ModelAdmin):
    list_display = ['anamnese_date', 'patient', 'chief_complaint', 'doctor', 'is_deleted']
    list_filter = ['is_deleted']
    search_fields = ['chief_complaint', 'diagnosis', 'patient__patient_name', 'patient__nome']
    readonly_fields = ['id', 'created_at', 'updated_at', 'deleted_at']
    autocomplete_fields = ['doctor', 'patient', 'deleted_by_user']


@admin.register(Exam)
class ExamAdmin(admin.ModelAdmin):
    list_display = ['exam_name', 'exam_type', 'exam_date', 'status', 'patient', 'is_deleted']
    list_filter = ['exam_type', 'status', 'is_deleted']
    search_fields = ['exam_name', 'exam_category', 'patient__patient_name', 'patient__nome']
    readonly_fields = ['id', 'created_at', 'updated_at', 'deleted_at']
    autocomplete_fields = ['doctor', 'patient', 'consultation', 'deleted_by_user']


@admin.register(Prescription)
class PrescriptionAdmin(admin.ModelAdmin):
    list_display = ['titulo', 'tipo', 'data_emissao', 'expiration_date', 'status', 'patient', 'is_deleted']
    list_filter = ['tipo', 'status', 'is_deleted']
    search_fields = ['titulo', 'general_instructions', 'patient__patient_name', 'patient__nome']
    readonly_fields = ['id', 'pdf_url', 'created_at', 'updated_at', 'deleted_at']
    autocomplete_fields = ['doctor', 'patient', 'consultation', 'deleted_by_user']


@admin.register(Note)
class NoteAdmin(admin.ModelAdmin):
    list_display = ['note_title', 'note_type', 'is_important', 'view_count', 'patient', 'is_deleted']
    list_filter = ['note_type', 'is_important', 'is_deleted']
    search_fields = ['note_title', 'note_text', 'patient__patient_name', 'patient__nome']
    readonly_fields = ['id', 'view_count', 'last_modified', 'modified_by', 'created_at', 'updated_at', 'deleted_at']
    autocomplete_fields = ['doctor', 'patient', 'deleted_by_user']
