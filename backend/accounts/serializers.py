from rest_framework import serializers

from accounts.models import AppRole, Department, UserProfile


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)


class MeSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    email = serializers.CharField(read_only=True)
    first_name = serializers.CharField(read_only=True)
    last_name = serializers.CharField(read_only=True)
    matricule = serializers.CharField(read_only=True)
    role = serializers.CharField(read_only=True)
    permissions = serializers.SerializerMethodField()
    department_code = serializers.CharField(read_only=True, allow_null=True)
    program_code = serializers.CharField(read_only=True, allow_null=True)

    def get_permissions(self, obj):
        return sorted(obj.permissions)


class UserProfileSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = UserProfile
        fields = ('user_id', 'full_name', 'first_name', 'last_name', 'email', 'role', 'department_code', 'program_code')
        read_only_fields = fields


class ProfileSerializer(serializers.ModelSerializer):
    """The signed-in user's directory row. Identity fields stay read-only."""
    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = UserProfile
        fields = (
            'user_id', 'full_name', 'first_name', 'last_name', 'email', 'phone', 'matricule',
            'role', 'department_code', 'program_code', 'synced_at',
        )
        read_only_fields = ('user_id', 'email', 'matricule', 'role', 'department_code', 'program_code', 'synced_at')


class DirectoryProfileSerializer(ProfileSerializer):
    """Admin view of any directory row; also lets admins fix the matricule and deactivate."""

    class Meta(ProfileSerializer.Meta):
        fields = ProfileSerializer.Meta.fields + ('is_active',)
        read_only_fields = ('user_id', 'email', 'role', 'department_code', 'program_code', 'synced_at')


HEAD_ROLES = (AppRole.DEPARTMENT_HEAD, AppRole.DIRECTOR, AppRole.ADMIN)


class DepartmentSerializer(serializers.ModelSerializer):
    head_name = serializers.SerializerMethodField()

    class Meta:
        model = Department
        fields = ('id', 'code', 'name', 'description', 'head_id', 'head_name', 'created_at', 'updated_at')
        read_only_fields = ('id', 'head_name', 'created_at', 'updated_at')
        extra_kwargs = {'head_id': {'required': False, 'allow_null': True, 'allow_blank': True}}

    def get_head_name(self, obj):
        if not obj.head_id:
            return None
        profile = UserProfile.objects.filter(user_id=obj.head_id).first()
        return profile.full_name if profile else None

    def validate_code(self, value):
        code = value.strip().upper()
        if not code:
            raise serializers.ValidationError('This field may not be blank.')
        clash = Department.objects.filter(code=code)
        if self.instance is not None:
            clash = clash.exclude(pk=self.instance.pk)
        if clash.exists():
            raise serializers.ValidationError('A department with this code already exists.')
        return code

    def validate_name(self, value):
        name = value.strip()
        if not name:
            raise serializers.ValidationError('This field may not be blank.')
        return name

    def validate_head_id(self, value):
        head_id = str(value or '').strip()
        if not head_id:
            return None
        if not UserProfile.objects.filter(user_id=head_id, is_active=True, role__in=HEAD_ROLES).exists():
            raise serializers.ValidationError('Head must be an active department head, director or admin.')
        return head_id
