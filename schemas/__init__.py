# Schemas package 
from .auth import UserCreate, LoginRequest, UserResponse, SessionResponse
from .posts import PostCreate, PostListItem, PostResponse, CommentCreate, CommentResponse, CategoryResponse, PostLikeRequest, CommentLikeRequest, ReactionResponse
from .profile import ProfileUpdate, ProfileResponse, ProfileCounts, PageMeta, ProfilePostsPage, ProfileCommentsPage, AvatarResponse, CsrfTokenResponse
