from django.contrib import admin

from livestock.models import AnimalType, Answer, DeletedAnimalDetail, MotherCalfLink, Question


@admin.register(AnimalType)
class AnimalTypeAdmin(admin.ModelAdmin):
    list_display = ('name',)
    search_fields = ('name',)


@admin.register(Question)
class QuestionAdmin(admin.ModelAdmin):
    list_display = ('text', 'tag', 'scope', 'category', 'is_deleted')
    list_filter = ('scope', 'tag', 'is_deleted')
    search_fields = ('text', 'category')


@admin.register(Answer)
class AnswerAdmin(admin.ModelAdmin):
    list_display = ('owner', 'animal_type', 'animal_number', 'tag', 'value', 'status', 'created_at', 'deleted_at')
    list_filter = ('tag', 'status', 'animal_type')
    search_fields = ('animal_number', 'value', 'owner__username', 'owner__phone')
    raw_id_fields = ('owner', 'question')
    date_hierarchy = 'created_at'


@admin.register(MotherCalfLink)
class MotherCalfLinkAdmin(admin.ModelAdmin):
    list_display = ('owner', 'mother_animal_number', 'calf_animal_number', 'delivery_date')
    raw_id_fields = ('owner',)


@admin.register(DeletedAnimalDetail)
class DeletedAnimalDetailAdmin(admin.ModelAdmin):
    list_display = ('owner', 'animal_number', 'tag', 'value', 'retired_at')
    raw_id_fields = ('owner', 'question')
