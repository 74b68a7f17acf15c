from django.contrib import admin

from .models import Department, UserProfile


class UserProfileAdmin(admin.ModelAdmin):
    list_display = ('user_id', 'last_name', 'first_name', 'role', 'department_code', 'program_code', 'is_active', 'synced_at')
    list_filter = ('role', 'department_code', 'is_active')
    search_fields = ('user_id', 'email', 'matricule', 'last_name', 'first_name', 'phone')
    readonly_fields = ('synced_at',)


class DepartmentAdmin(admin.ModelAdmin):
    list_display = ('code', 'name', 'head_id', 'updated_at')
    search_fields = ('code', 'name')
    readonly_fields = ('created_at', 'updated_at')


admin.site.register(UserProfile, UserProfileAdmin)
admin.site.register(Department, DepartmentAdmin)
