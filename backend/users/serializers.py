from rest_framework import serializers
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

User=get_user_model()


class UserRegistrationSerializer(serializers.ModelSerializer):
    password=serializers.CharField(
        write_only=True,
        required=True,
        validators=[validate_password]
    )

    password2=serializers.CharField(write_only=True,required=True)

    class Meta:
        model=User
        fields=(
            'email',
            'password',
            'password2',
            'first_name',
            'last_name',
        )
        extra_kwargs = {
            'email': {'required': True},
        }

    def validate(self, attrs):
        if attrs['password'] != attrs['password2']:
            raise serializers.ValidationError({"password": "Password fields didn't match."})
        return attrs

    def create(self, validated_data):
        validated_data.pop('password2')

        return User.objects.create_user(
            email=validated_data['email'],
            password=validated_data['password'],
            first_name=validated_data.get('first_name', ''),
            last_name=validated_data.get('last_name', ''),
        )


class UserDetailsSerializer(serializers.ModelSerializer):
    """Serializer for returning the authenticated actor"""
    class Meta:
        model=User
        fields=(
            'id',
            'email',
            'first_name',
            'last_name',
        )
        read_only_fields=fields


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    Token serializer that authenticates by email and adds the
    email claim to the token payload.
    """
    username_field = 'email'

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['email'] = user.email
        return token
